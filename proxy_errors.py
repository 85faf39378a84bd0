"""Errors that end a proxied request with a JSON `{"error": ...}` body."""


class ProxyError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {'error': self.message}


class MissingParameterError(ProxyError):
    """No `url` query parameter was given"""
    status_code = 400

    def __init__(self, message='URL parameter is required'):
        super().__init__(message)


class InvalidTargetError(ProxyError):
    """The target cannot be parsed as an http(s) URL"""
    status_code = 400

    def __init__(self, target=None):
        super().__init__('Invalid URL provided')
        self.target = target


class UpstreamUnavailableError(ProxyError):
    """Network, DNS or timeout failure while contacting the target"""
    status_code = 500

    def __init__(self, cause):
        super().__init__(f'Failed to fetch website: {cause}')
        self.cause = cause


class SubmissionError(ProxyError):
    """Forwarding a form POST to the target failed"""
    status_code = 500

    def __init__(self, cause):
        super().__init__(f'Failed to submit form: {cause}')
        self.cause = cause
