"""
Embedded Signing Helpers
"""


def breakout_path(path: str) -> str:
    """
    HTML that sends the parent window to path.

    Render this as the return_url response of an embedded signing view so
    the redirect escapes the signing iframe, e.g.:

        if request.args.get('event') == 'signing_complete':
            return breakout_path('/deals/42'), 200, {'Content-Type': 'text/html'}
    """
    target = str(path).replace('\\', '\\\\').replace("'", "\\'")
    return (
        "<html><body><script type='text/javascript' charset='utf-8'>"
        f"parent.location.href = '{target}';"
        "</script></body></html>"
    )
