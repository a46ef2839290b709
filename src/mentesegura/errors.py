"""
Error taxonomy shared by the relay, the chat controller and the API.

Every error carries the HTTP status it maps to and a message that can be shown
to the student as-is.
"""
from typing import Optional


class MenteSeguraError(Exception):
    """Base class for errors surfaced to the end user."""

    status_code: int = 500
    message: str = "Erro ao processar sua mensagem"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class MissingCredentialError(MenteSeguraError):
    status_code = 401
    message = "Sessão inválida ou expirada. Entre novamente."


class UpstreamRateLimitedError(MenteSeguraError):
    status_code = 429
    message = "Muitas solicitações. Por favor, tente novamente em alguns instantes."


class UpstreamUnavailableError(MenteSeguraError):
    status_code = 402
    message = "Serviço temporariamente indisponível. Por favor, contate o administrador."


class UpstreamError(MenteSeguraError):
    status_code = 500
    message = "Erro ao processar sua mensagem"


class GatewayNotConfiguredError(MenteSeguraError):
    status_code = 500
    message = "LOVABLE_API_KEY is not configured"


class PersistenceError(MenteSeguraError):
    status_code = 500
    message = "Não foi possível salvar a mensagem."


class ConversationNotFoundError(MenteSeguraError):
    status_code = 404
    message = "Conversa não encontrada."
