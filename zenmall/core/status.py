# zenmall/core/status.py
"""
Máquina de estados do Pedido.

Define os status possíveis e a tabela de transições permitidas. O guard é puro:
não conhece banco de dados nem efeitos colaterais, apenas responde se uma
transição é legal.
"""
from enum import StrEnum
from typing import Dict, FrozenSet


class StatusPedido(StrEnum):
    """Status de um Pedido. Os valores são os mesmos expostos na API."""
    PENDENTE = 'pending'
    PAGO = 'paid'
    ENVIADO = 'shipped'
    CONCLUIDO = 'completed'
    EM_REEMBOLSO = 'refunding'
    REEMBOLSADO = 'refunded'

    @property
    def rotulo(self) -> str:
        return _ROTULOS[self]


_ROTULOS = {
    StatusPedido.PENDENTE: 'Pendente de Pagamento',
    StatusPedido.PAGO: 'Pago',
    StatusPedido.ENVIADO: 'Enviado',
    StatusPedido.CONCLUIDO: 'Concluído',
    StatusPedido.EM_REEMBOLSO: 'Em Reembolso',
    StatusPedido.REEMBOLSADO: 'Reembolsado',
}


# ====================================================================
# TABELA DE TRANSIÇÕES
# ====================================================================

TRANSICOES: Dict[StatusPedido, FrozenSet[StatusPedido]] = {
    StatusPedido.PENDENTE: frozenset({StatusPedido.PAGO, StatusPedido.REEMBOLSADO}),
    StatusPedido.PAGO: frozenset({StatusPedido.ENVIADO, StatusPedido.EM_REEMBOLSO}),
    StatusPedido.ENVIADO: frozenset({StatusPedido.CONCLUIDO, StatusPedido.EM_REEMBOLSO}),
    StatusPedido.CONCLUIDO: frozenset({StatusPedido.EM_REEMBOLSO}),
    StatusPedido.EM_REEMBOLSO: frozenset({StatusPedido.REEMBOLSADO}),
    StatusPedido.REEMBOLSADO: frozenset(),
}

# Status cujo valor entra no faturamento (pendentes e reembolsados ficam de fora).
STATUS_RECEITA: FrozenSet[StatusPedido] = frozenset({
    StatusPedido.PAGO,
    StatusPedido.ENVIADO,
    StatusPedido.CONCLUIDO,
})

# Entrar em qualquer um destes status devolve as quantidades ao estoque.
STATUS_RESTAURA_ESTOQUE: FrozenSet[StatusPedido] = frozenset({StatusPedido.REEMBOLSADO})


def transicoes_permitidas(atual: StatusPedido) -> FrozenSet[StatusPedido]:
    """Retorna o conjunto de próximos status permitidos a partir de `atual`."""
    return TRANSICOES.get(StatusPedido(atual), frozenset())


def pode_transitar(atual: StatusPedido, novo: StatusPedido) -> bool:
    return StatusPedido(novo) in transicoes_permitidas(atual)


def choices_django():
    """Lista de (valor, rótulo) para o campo `choices` dos models."""
    return [(status.value, status.rotulo) for status in StatusPedido]
