"""
=============================================================================
STATIC FILE SERVING
=============================================================================

Maps a request resource onto a file under the webroot and loads it.

    Request: GET /css/site.css HTTP/1.1

    1. Strip the first "/"          "/css/site.css"  →  "css/site.css"
    2. Join onto the webroot        "webroot" + "css/site.css"
                                    →  "webroot/css/site.css"
    3. Infer MIME from extension    "css"  →  "text/css"
    4. Read the whole file          ok → 200, OSError → 404

=============================================================================
SECURITY: PATH TRAVERSAL IS NOT PREVENTED
=============================================================================

The resource is joined onto the webroot as-is. Nothing resolves ".."
segments or checks that the result stays inside the webroot:

    GET /../web.toml          → webroot/../web.toml        (config file!)
    GET //etc/passwd          → "/etc/passwd" after stripping, and
                                os.path.join() discards the webroot
                                for an absolute second argument

Any file readable by the server process can be requested. Deploy behind
a proxy that normalizes paths, or run the server as a user that can only
read the webroot, until path canonicalization is added.

=============================================================================
"""

import logging
import os

from ..http.mime_types import extension, mime_type
from ..http.request import Request
from ..http.response import BinaryBody, Response, TextBody
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


def resolve_path(resource: str, webroot: str) -> str:
    """
    Translate a resource path into a filesystem path under ``webroot``.

    Only the first "/" is removed. See the module docstring for why the
    result is not confined to the webroot.

        >>> resolve_path("/hello.htm", "webroot")
        'webroot/hello.htm'
    """
    relative = resource.replace("/", "", 1)
    return os.path.join(webroot, relative)


def load_body(path: str) -> TextBody | BinaryBody:
    """
    Read a file and tag its content.

    Content that decodes as UTF-8 becomes a TextBody, anything else a
    BinaryBody. Raises OSError when the file cannot be read, ValueError
    when the path holds a NUL byte.
    """
    with open(path, "rb") as f:
        data = f.read()

    try:
        return TextBody(data.decode("utf-8"))
    except UnicodeDecodeError:
        return BinaryBody(data)


class StaticFileHandler:
    """
    Serves files from a webroot directory.

    Usage:
        handler = StaticFileHandler("webroot")
        response = handler.handle(request)   # 200 or 404
    """

    def __init__(self, webroot: str):
        self.webroot = webroot

    def handle(self, request: Request) -> Response:
        """
        Load the file named by ``request.resource``.

        Returns:
            200 with the file content, or 404 carrying the I/O error text.
            A path the OS cannot represent (embedded NUL) is a 404 too.
        """
        path = resolve_path(request.resource, self.webroot)
        logger.debug(f"Requesting page: {path}")

        try:
            body = load_body(path)
        except (OSError, ValueError) as e:
            logger.debug(f"Could not read {path}: {e}")
            return Response(code=HTTPStatus.NOT_FOUND, body=TextBody(str(e)))

        mime = mime_type(extension(request.resource))
        return Response(code=HTTPStatus.OK, mime=mime, body=body)
