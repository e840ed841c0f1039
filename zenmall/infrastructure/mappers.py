"""
Mapeadores (Mappers) para converter entre:
1. Modelos do Django ORM
2. Entidades de Domínio (zenmall.core.entities)
"""
from typing import Any, Optional

from django.apps import apps

from zenmall.core.entities import (
    Categoria as CategoriaEntity,
    Produto as ProdutoEntity,
    Carrinho as CarrinhoEntity,
    ItemCarrinho as ItemCarrinhoEntity,
    Pedido as PedidoEntity,
    ItemPedido as ItemPedidoEntity,
    EnderecoEntrega,
)
from zenmall.core.status import StatusPedido


def get_model(app_label: str, model_name: str):
    """Retorna um modelo do Django de forma segura (lazy loading)."""
    return apps.get_model(app_label, model_name)


# ====================================================================
# MAPPERS DO CATÁLOGO
# ====================================================================

class CategoriaMapper:
    """Mapeador para Categoria."""

    @staticmethod
    def to_entity(model: Any) -> Optional[CategoriaEntity]:
        if not model: return None
        return CategoriaEntity(
            id=model.id,
            nome=model.nome,
            descricao=model.descricao,
            parent_id=model.parent_id,
        )


class ProdutoMapper:
    """Mapeador para Produto."""

    @staticmethod
    def to_entity(model: Any) -> Optional[ProdutoEntity]:
        """Converte Produto Model para Produto Entity."""
        if not model: return None
        return ProdutoEntity(
            id=model.id,
            nome=model.nome,
            descricao=model.descricao,
            preco=model.preco,
            estoque=model.estoque,
            status=model.status,
            categoria_id=model.categoria_id,
            categoria=CategoriaMapper.to_entity(model.categoria) if model.categoria_id else None,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
        )


# ====================================================================
# MAPPERS DO CARRINHO
# ====================================================================

class ItemCarrinhoMapper:
    """Mapeador para ItemCarrinho."""

    @staticmethod
    def to_entity(model: Any) -> Optional[ItemCarrinhoEntity]:
        if not model: return None
        return ItemCarrinhoEntity(
            id=model.id,
            carrinho_id=model.carrinho_id,
            produto_id=model.produto_id,
            quantidade=model.quantidade,
            produto=ProdutoMapper.to_entity(model.produto),
        )


class CarrinhoMapper:
    """Mapeador para Carrinho."""

    @staticmethod
    def to_entity(model: Any) -> Optional[CarrinhoEntity]:
        """Converte Carrinho Model para Carrinho Entity, incluindo itens."""
        if not model: return None

        itens = model.itens.select_related('produto__categoria').order_by('criado_em', 'id')
        return CarrinhoEntity(
            id=model.id,
            usuario_id=model.usuario_id,
            preco_total=model.preco_total,
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
            itens=[ItemCarrinhoMapper.to_entity(item) for item in itens],
        )


# ====================================================================
# MAPPERS DE PEDIDO
# ====================================================================

class ItemPedidoMapper:
    """Mapeador para ItemPedido."""

    @staticmethod
    def to_entity(model: Any) -> Optional[ItemPedidoEntity]:
        if not model: return None
        produto = ProdutoMapper.to_entity(model.produto)
        return ItemPedidoEntity(
            id=model.id,
            pedido_id=model.pedido_id,
            produto_id=model.produto_id,
            quantidade=model.quantidade,
            preco=model.preco,
            produto=produto.resumo() if produto else None,
        )

    @staticmethod
    def to_model(entity: ItemPedidoEntity, pedido_id: int) -> Any:
        """Converte ItemPedido Entity para ItemPedido Model (snapshot do preço)."""
        return get_model('pedidos', 'ItemPedido')(
            pedido_id=pedido_id,
            produto_id=entity.produto_id,
            quantidade=entity.quantidade,
            preco=entity.preco,
        )


class PedidoMapper:
    """Mapeador para Pedido."""

    @staticmethod
    def to_entity(model: Any) -> Optional[PedidoEntity]:
        """Converte Pedido Model para Pedido Entity, incluindo itens e endereço snapshot."""
        if not model: return None
        return PedidoEntity(
            id=model.id,
            numero_pedido=model.numero_pedido,
            usuario_id=model.usuario_id,
            preco_total=model.preco_total,
            status=StatusPedido(model.status),
            observacao=model.observacao,
            endereco_entrega=EnderecoEntrega.from_dict(model.endereco_entrega),
            criado_em=model.criado_em,
            atualizado_em=model.atualizado_em,
            itens=[ItemPedidoMapper.to_entity(item) for item in model.itens.all()],
        )

    @staticmethod
    def to_model(entity: PedidoEntity) -> Any:
        """Converte Pedido Entity para um novo Pedido Model."""
        return get_model('pedidos', 'Pedido')(
            numero_pedido=entity.numero_pedido,
            usuario_id=entity.usuario_id,
            preco_total=entity.preco_total,
            status=StatusPedido(entity.status).value,
            observacao=entity.observacao,
            endereco_entrega=entity.endereco_entrega.to_dict() if entity.endereco_entrega else None,
        )
