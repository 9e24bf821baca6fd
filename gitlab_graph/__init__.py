"""
gitlab-graph: GitLab contribution graph for the terminal and the browser.
"""

__version__ = "0.1.0"
