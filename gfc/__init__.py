"""
gitea-fly-connector: deploys Gitea pushes to Fly.io.
"""

__version__ = "0.1.0"
