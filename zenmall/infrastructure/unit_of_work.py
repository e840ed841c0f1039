"""
Unidade de Trabalho com o Django ORM.

Cada `with uow:` abre um bloco `transaction.atomic()`; uma exceção que escapa
do bloco desfaz todas as escritas dos repositórios feitas dentro dele.
"""
from typing import List, Optional

from django.db import transaction

from zenmall.core.ports import IUnidadeDeTrabalho

from .repositories import CarrinhoRepositoryDjango, PedidoRepositoryDjango, ProdutoRepositoryDjango


class UnidadeDeTrabalhoDjango(IUnidadeDeTrabalho):
    """Fronteira transacional sobre `transaction.atomic` (aninhável via savepoints)."""

    def __init__(self, using: Optional[str] = None):
        self.using = using
        self.produtos = ProdutoRepositoryDjango()
        self.carrinhos = CarrinhoRepositoryDjango()
        self.pedidos = PedidoRepositoryDjango()
        self._blocos: List[transaction.Atomic] = []

    def __enter__(self) -> 'UnidadeDeTrabalhoDjango':
        bloco = transaction.atomic(using=self.using)
        bloco.__enter__()
        self._blocos.append(bloco)
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        bloco = self._blocos.pop()
        return bloco.__exit__(exc_type, exc, tb)
