from __future__ import annotations

from django.utils.deprecation import MiddlewareMixin


class ContentSecurityPolicyMiddleware(MiddlewareMixin):
    """Add a Content-Security-Policy header.

    Inline scripts and styles stay blocked. Challenge videos are YouTube
    embeds, so their player and thumbnails are the only third-party
    frame/image origins besides the DiceBear avatars.
    """

    def process_response(self, request, response):  # noqa: D401
        style_src = "'self'"

        # Swagger UI injects one small inline <style> block; allow it on /docs/ via hash.
        if request.path == "/docs/":
            style_src = (
                "'self' "
                "'sha256-RL3ie0nH+Lzz2YNqQN83mnU0J1ot4QL7b99vMdIX99w=' "
                "'unsafe-hashes'"
            )

        csp = (
            "default-src 'self'; "
            "img-src 'self' https://api.dicebear.com https://i.ytimg.com data:; "
            "media-src 'self' https:; "
            "frame-src https://www.youtube.com https://www.youtube-nocookie.com; "
            "script-src 'self'; "
            f"style-src {style_src}; "
            "connect-src 'self' ws: wss:; "
            "frame-ancestors 'none'"
        )
        response["Content-Security-Policy"] = csp
        return response
