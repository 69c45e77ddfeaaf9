"""Bundle Diff — compare Gemfile.lock snapshots across git history.

Reports every gem that was added, removed, updated or left unchanged between
two refs, with the semantic size of each update and Ruby Toolbox health data.
"""

__version__ = "0.1.0"
