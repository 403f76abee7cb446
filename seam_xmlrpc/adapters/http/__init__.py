"""
HTTP Adapter Package

requests-based client transport, WSGI application and a threaded standalone
server, all carrying XML-RPC as text/xml POST bodies.
"""

from seam_xmlrpc.adapters.http.client import HTTPTransport
from seam_xmlrpc.adapters.http.server import StandaloneServer
from seam_xmlrpc.adapters.http.wsgi import WSGIApplication

__all__ = ["HTTPTransport", "StandaloneServer", "WSGIApplication"]
