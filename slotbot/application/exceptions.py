class LLMUpstreamError(RuntimeError):
    """Raised when LLM provider fails (timeouts, network errors, service unavailable)."""
    pass


class LLMContractError(RuntimeError):
    """Raised when LLM adapter violates contract (bad format or missing data)."""
    pass


class TenantResolutionError(LookupError):
    """Raised when an inbound channel number maps to no tenant."""
    pass


class StoreError(RuntimeError):
    """Raised when the persistence backend fails."""
    pass
