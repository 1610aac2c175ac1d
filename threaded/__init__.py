"""
Threaded reading backend.

Session persistence, copy-on-write forking for shared links, owner-token
authorization, a content-addressed parse cache, and the client-side
ownership tracker that forks shared sessions on first write.
"""

__version__ = "0.1.0"
