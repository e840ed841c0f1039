# zenmall/core/ports.py
"""
Definição das Portas (Interfaces/Protocolos) da Arquitetura Limpa.

Estes protocolos definem o contrato que a camada de Infraestrutura (Repositórios,
Unidade de Trabalho) DEVE seguir para se conectar à camada Core (Casos de Uso).
"""

from typing import Protocol, List, Optional, Dict, Iterable
from abc import abstractmethod
from datetime import datetime
from decimal import Decimal

from zenmall.core.entities import (
    Produto, Carrinho, ItemCarrinho, Pedido, FiltroPedidos, Pagina
)
from zenmall.core.status import StatusPedido


# ====================================================================
# 1. REPOSITÓRIOS (Portas de Persistência)
# ====================================================================

class IProdutoRepository(Protocol):
    """Protocolo para a persistência e busca de Produtos e do seu estoque."""

    @abstractmethod
    def buscar_por_id(self, produto_id: int) -> Optional[Produto]: ...

    @abstractmethod
    def listar_ativos(self, pagina: int, limite: int, categoria_id: Optional[int] = None) -> Pagina[Produto]: ...

    @abstractmethod
    def decrementar_estoque(self, produto_id: int, quantidade: int) -> bool:
        """
        Baixa condicional: só decrementa se `estoque >= quantidade`.
        Retorna False quando nenhuma linha foi afetada (estoque insuficiente).
        """
        ...

    @abstractmethod
    def incrementar_estoque(self, produto_id: int, quantidade: int) -> None: ...


class ICarrinhoRepository(Protocol):
    """Protocolo para a persistência de Carrinhos (um por usuário)."""

    @abstractmethod
    def buscar_ou_criar(self, usuario_id: int) -> Carrinho: ...

    @abstractmethod
    def buscar_itens_por_usuario(self, usuario_id: int) -> List[ItemCarrinho]: ...

    @abstractmethod
    def buscar_item(self, usuario_id: int, item_id: int) -> Optional[ItemCarrinho]: ...

    @abstractmethod
    def salvar_item(self, carrinho: Carrinho, produto_id: int, quantidade: int) -> ItemCarrinho:
        """Grava a quantidade final da linha (cria a linha se ela não existir)."""
        ...

    @abstractmethod
    def remover_item(self, usuario_id: int, item_id: int) -> None: ...

    @abstractmethod
    def limpar_para_usuario(self, usuario_id: int) -> None: ...

    @abstractmethod
    def recalcular_total(self, usuario_id: int) -> Carrinho:
        """Recalcula `preco_total` com os preços atuais e devolve o carrinho completo."""
        ...


class IPedidoRepository(Protocol):
    """Protocolo para a persistência e gestão de Pedidos."""

    @abstractmethod
    def criar(self, pedido: Pedido) -> Pedido:
        """Grava o Pedido e seus itens (snapshot). Retorna o pedido com IDs preenchidos."""
        ...

    @abstractmethod
    def buscar_por_id(self, pedido_id: int, usuario_id: Optional[int] = None) -> Optional[Pedido]: ...

    @abstractmethod
    def listar_por_usuario(self, usuario_id: int) -> List[Pedido]: ...

    @abstractmethod
    def filtrar(self, filtro: FiltroPedidos) -> Pagina[Pedido]: ...

    @abstractmethod
    def atualizar_status(self, pedido_id: int, novo_status: StatusPedido,
                         status_atual: Optional[StatusPedido] = None) -> bool:
        """Com `status_atual`, só grava se o pedido ainda estiver nesse status."""
        ...

    @abstractmethod
    def atualizar_observacao(self, pedido_id: int, observacao: Optional[str]) -> None: ...

    @abstractmethod
    def deletar(self, pedido_id: int) -> None: ...

    @abstractmethod
    def contar_por_status(self) -> Dict[str, int]: ...

    @abstractmethod
    def contar_criados_entre(self, inicio: datetime, fim: datetime) -> int: ...

    @abstractmethod
    def somar_total_por_status(self, status: Iterable[StatusPedido]) -> Decimal: ...


# ====================================================================
# 2. UNIDADE DE TRABALHO (Fronteira Transacional)
# ====================================================================

class IUnidadeDeTrabalho(Protocol):
    """
    Fronteira atômica explícita. Tudo o que é feito pelos repositórios dentro de
    `with uow:` é confirmado junto; se uma exceção sair do bloco, nada persiste.
    """
    produtos: IProdutoRepository
    carrinhos: ICarrinhoRepository
    pedidos: IPedidoRepository

    def __enter__(self) -> 'IUnidadeDeTrabalho': ...

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]: ...
