from __future__ import annotations


class DomainError(Exception):
    """Base para erros de dominio."""


class DivisionByZeroError(DomainError):
    """Fracao construida com denominador zero."""


class CannotInvertZeroError(DomainError):
    """Tentativa de inverter uma fracao com numerador zero."""


class TickOutOfRangeError(DomainError):
    """Tick ou sqrt price fora do intervalo suportado."""


class InvalidDataError(DomainError):
    """Snapshot on-chain malformado."""

    def __init__(self, object_id: str, field: str, message: str | None = None):
        self.object_id = object_id
        self.field = field
        detail = message or "invalid value"
        super().__init__(f"Invalid data for object {object_id or '<unknown>'} field {field}: {detail}")


class PositionNotFoundError(DomainError):
    """Posicao solicitada nao existe no ledger."""


class NoPositionFoundError(DomainError):
    """Nenhuma posicao do operador encontrada na pool alvo."""


class ExecutionFailedError(DomainError):
    """Ledger rejeitou ou reverteu o plano submetido."""


class InvalidSlippageToleranceError(DomainError):
    """Tolerancia de slippage fora de [0, 1]."""


class UnsupportedProtocolError(DomainError):
    """Protocolo CLMM nao suportado."""


class WorkerTimeoutError(DomainError):
    """Ciclo do worker excedeu o timeout rigido."""


class PoolNotFoundError(DomainError):
    """Pool solicitada nao existe no ledger."""
