"""
Code Theater - turn git history into a dramatic screenplay.

Reads a commit range, compresses it into a bounded number of scenes
(single commits, themed montages and pivotal highlights), asks an LLM
director to write each scene, and renders the screenplay in the terminal.
"""

__version__ = "0.1.0"
