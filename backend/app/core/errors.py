from fastapi import HTTPException


class MarketplaceError(Exception):
    """Falha de regra de negócio do marketplace reportada de forma síncrona ao chamador."""

    status_code = 400
    retryable = False

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(MarketplaceError):
    status_code = 404

    def __init__(self, resource: str, detail: str | None = None):
        self.resource = resource
        labels = {"bid": "Proposta não encontrada", "gig": "Gig não encontrado"}
        super().__init__(detail or labels.get(resource, "Registro não encontrado"))


class UnauthorizedError(MarketplaceError):
    status_code = 403

    def __init__(self, detail: str = "Apenas o dono do gig pode contratar"):
        super().__init__(detail)


class InvalidStateError(MarketplaceError):
    status_code = 409

    def __init__(self, detail: str = "Gig já atribuído"):
        super().__init__(detail)


class TransactionFailure(MarketplaceError):
    status_code = 503
    retryable = True

    def __init__(self, detail: str = "Não foi possível concluir a contratação, tente novamente"):
        super().__init__(detail)


class DuplicateBidError(MarketplaceError):
    status_code = 409

    def __init__(self, detail: str = "Você já enviou uma proposta para este gig"):
        super().__init__(detail)


class OwnGigBidError(MarketplaceError):
    status_code = 400

    def __init__(self, detail: str = "Não é possível enviar proposta para o próprio gig"):
        super().__init__(detail)


def as_http_exception(exc: MarketplaceError) -> HTTPException:
    headers = {"Retry-After": "1"} if exc.retryable else None
    return HTTPException(status_code=exc.status_code, detail=exc.detail, headers=headers)
