class ZcapInvokeError(Exception):
    """Base class for zcap-invoke exceptions."""

    code = "ERR_ZCAP_INVOKE"


class ValidationError(ZcapInvokeError, ValueError):
    """The request to sign is malformed or incomplete. These errors are
    raised before any signing happens and can be fixed by the caller."""

    code = "ERR_ASSERTION"


class InvalidURLError(ZcapInvokeError, TypeError):
    """Neither the URL nor the headers carry the authority of the
    request."""

    code = "ERR_INVALID_URL"
