"""
Camada de Infraestrutura: Implementação de Repositórios com o Django ORM.

Esta camada traduz as operações abstratas definidas nas Portas do Core
em chamadas concretas ao framework. Nenhum repositório abre transação própria:
a fronteira atômica é sempre a Unidade de Trabalho que os contém.
"""
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from django.db.models import Count, DecimalField, F, Prefetch, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from zenmall.core.entities import (
    Carrinho, FiltroPedidos, ItemCarrinho, Pagina, Pedido, Produto, STATUS_PRODUTO_ATIVO
)
from zenmall.core.exceptions import ItemCarrinhoNaoEncontradoError
from zenmall.core.ports import ICarrinhoRepository, IPedidoRepository, IProdutoRepository
from zenmall.core.status import StatusPedido

from .mappers import (
    CarrinhoMapper, ItemCarrinhoMapper, ItemPedidoMapper, PedidoMapper, ProdutoMapper, get_model
)


# ====================================================================
# 1. REPOSITÓRIOS (Implementação Django ORM)
# ====================================================================

class ProdutoRepositoryDjango(IProdutoRepository):
    """Implementação do ProdutoRepository usando o Django ORM."""

    # Propriedades para carregar modelos de forma LAZY
    @property
    def ProdutoModel(self):
        return get_model('catalog', 'Produto')

    def buscar_por_id(self, produto_id: int) -> Optional[Produto]:
        try:
            model = self.ProdutoModel.objects.select_related('categoria').get(pk=produto_id)
            return ProdutoMapper.to_entity(model)
        except self.ProdutoModel.DoesNotExist:
            return None

    def listar_ativos(self, pagina: int, limite: int, categoria_id: Optional[int] = None) -> Pagina[Produto]:
        qs = self.ProdutoModel.objects.filter(status=STATUS_PRODUTO_ATIVO).select_related('categoria')
        if categoria_id:
            qs = qs.filter(categoria_id=categoria_id)

        total = qs.count()
        inicio = (pagina - 1) * limite
        produtos = [ProdutoMapper.to_entity(model) for model in qs.order_by('nome', 'id')[inicio:inicio + limite]]
        return Pagina(itens=produtos, total=total, pagina=pagina, limite=limite)

    def decrementar_estoque(self, produto_id: int, quantidade: int) -> bool:
        """
        UPDATE products SET estoque = estoque - q WHERE id = :id AND estoque >= q.
        Duas compras concorrentes nunca levam o estoque abaixo de zero.
        """
        linhas = self.ProdutoModel.objects.filter(
            pk=produto_id, estoque__gte=quantidade
        ).update(estoque=F('estoque') - quantidade)
        return linhas == 1

    def incrementar_estoque(self, produto_id: int, quantidade: int) -> None:
        # Produto ausente não é erro: PROTECT impede apagar produto com pedidos.
        self.ProdutoModel.objects.filter(pk=produto_id).update(estoque=F('estoque') + quantidade)


class CarrinhoRepositoryDjango(ICarrinhoRepository):
    """Implementação do CarrinhoRepository usando o Django ORM."""

    @property
    def CarrinhoModel(self):
        return get_model('carrinho', 'Carrinho')

    @property
    def ItemCarrinhoModel(self):
        return get_model('carrinho', 'ItemCarrinho')

    def _carrinho_model(self, usuario_id: int):
        carrinho_model, _ = self.CarrinhoModel.objects.get_or_create(usuario_id=usuario_id)
        return carrinho_model

    def buscar_ou_criar(self, usuario_id: int) -> Carrinho:
        """Busca o carrinho do usuário ou cria um vazio (criação preguiçosa)."""
        return CarrinhoMapper.to_entity(self._carrinho_model(usuario_id))

    def buscar_itens_por_usuario(self, usuario_id: int) -> List[ItemCarrinho]:
        qs = self.ItemCarrinhoModel.objects.filter(
            carrinho__usuario_id=usuario_id
        ).select_related('produto__categoria').order_by('criado_em', 'id')
        return [ItemCarrinhoMapper.to_entity(model) for model in qs]

    def buscar_item(self, usuario_id: int, item_id: int) -> Optional[ItemCarrinho]:
        try:
            model = self.ItemCarrinhoModel.objects.select_related('produto').get(
                pk=item_id, carrinho__usuario_id=usuario_id
            )
            return ItemCarrinhoMapper.to_entity(model)
        except self.ItemCarrinhoModel.DoesNotExist:
            return None

    def salvar_item(self, carrinho: Carrinho, produto_id: int, quantidade: int) -> ItemCarrinho:
        model, _ = self.ItemCarrinhoModel.objects.update_or_create(
            carrinho_id=carrinho.id,
            produto_id=produto_id,
            defaults={'quantidade': quantidade},
        )
        return ItemCarrinhoMapper.to_entity(model)

    def remover_item(self, usuario_id: int, item_id: int) -> None:
        apagados, _ = self.ItemCarrinhoModel.objects.filter(
            pk=item_id, carrinho__usuario_id=usuario_id
        ).delete()
        if not apagados:
            raise ItemCarrinhoNaoEncontradoError()

    def limpar_para_usuario(self, usuario_id: int) -> None:
        """Remove todas as linhas do carrinho do usuário e zera o total."""
        self.ItemCarrinhoModel.objects.filter(carrinho__usuario_id=usuario_id).delete()
        self.CarrinhoModel.objects.filter(usuario_id=usuario_id).update(preco_total=Decimal('0.00'))

    def recalcular_total(self, usuario_id: int) -> Carrinho:
        carrinho_model = self._carrinho_model(usuario_id)
        total = self.ItemCarrinhoModel.objects.filter(carrinho=carrinho_model).aggregate(
            total=Coalesce(
                Sum(F('quantidade') * F('produto__preco'), output_field=DecimalField(max_digits=12, decimal_places=2)),
                Value(Decimal('0.00')),
                output_field=DecimalField(max_digits=12, decimal_places=2),
            )
        )['total']
        carrinho_model.preco_total = Decimal(total).quantize(Decimal('0.01'))
        carrinho_model.save(update_fields=['preco_total', 'atualizado_em'])
        return CarrinhoMapper.to_entity(carrinho_model)


class PedidoRepositoryDjango(IPedidoRepository):
    """Implementação do PedidoRepository usando o Django ORM."""

    @property
    def PedidoModel(self):
        return get_model('pedidos', 'Pedido')

    @property
    def ItemPedidoModel(self):
        return get_model('pedidos', 'ItemPedido')

    def _queryset(self):
        # Pré-carrega itens e produtos para o mapeamento completo
        return self.PedidoModel.objects.prefetch_related(
            Prefetch('itens', queryset=self.ItemPedidoModel.objects.select_related('produto').order_by('id'))
        )

    def criar(self, pedido: Pedido) -> Pedido:
        model = PedidoMapper.to_model(pedido)
        model.save()

        self.ItemPedidoModel.objects.bulk_create([
            ItemPedidoMapper.to_model(item, pedido_id=model.id) for item in pedido.itens
        ])
        return PedidoMapper.to_entity(self._queryset().get(pk=model.pk))

    def buscar_por_id(self, pedido_id: int, usuario_id: Optional[int] = None) -> Optional[Pedido]:
        qs = self._queryset()
        if usuario_id is not None:
            qs = qs.filter(usuario_id=usuario_id)
        try:
            return PedidoMapper.to_entity(qs.get(pk=pedido_id))
        except self.PedidoModel.DoesNotExist:
            return None

    def listar_por_usuario(self, usuario_id: int) -> List[Pedido]:
        qs = self._queryset().filter(usuario_id=usuario_id).order_by('-criado_em', '-id')
        return [PedidoMapper.to_entity(model) for model in qs]

    def filtrar(self, filtro: FiltroPedidos) -> Pagina[Pedido]:
        qs = self._queryset()

        if filtro.numero_pedido:
            qs = qs.filter(numero_pedido__icontains=filtro.numero_pedido)
        if filtro.usuario_id is not None:
            qs = qs.filter(usuario_id=filtro.usuario_id)
        if filtro.status:
            qs = qs.filter(status=StatusPedido(filtro.status).value)
        if filtro.data_inicio:
            qs = qs.filter(criado_em__date__gte=filtro.data_inicio)
        if filtro.data_fim:
            qs = qs.filter(criado_em__date__lte=filtro.data_fim)
        if filtro.valor_minimo is not None:
            qs = qs.filter(preco_total__gte=filtro.valor_minimo)
        if filtro.valor_maximo is not None:
            qs = qs.filter(preco_total__lte=filtro.valor_maximo)

        total = qs.count()
        inicio = filtro.deslocamento
        pedidos = qs.order_by('-criado_em', '-id')[inicio:inicio + filtro.limite]
        return Pagina(
            itens=[PedidoMapper.to_entity(model) for model in pedidos],
            total=total,
            pagina=filtro.pagina,
            limite=filtro.limite,
        )

    def atualizar_status(self, pedido_id: int, novo_status: StatusPedido,
                         status_atual: Optional[StatusPedido] = None) -> bool:
        """
        UPDATE mall_order SET status = :novo WHERE id = :id AND status = :atual.
        Zero linhas afetadas = outra transação mudou o status depois da leitura.
        """
        qs = self.PedidoModel.objects.filter(pk=pedido_id)
        if status_atual is not None:
            qs = qs.filter(status=StatusPedido(status_atual).value)
        linhas = qs.update(status=StatusPedido(novo_status).value, atualizado_em=timezone.now())
        return linhas == 1

    def atualizar_observacao(self, pedido_id: int, observacao: Optional[str]) -> None:
        model = self.PedidoModel.objects.get(pk=pedido_id)
        model.observacao = observacao
        model.save(update_fields=['observacao', 'atualizado_em'])

    def deletar(self, pedido_id: int) -> None:
        # CASCADE remove os ItemPedido junto
        self.PedidoModel.objects.filter(pk=pedido_id).delete()

    def contar_por_status(self) -> Dict[str, int]:
        linhas = self.PedidoModel.objects.order_by().values('status').annotate(quantidade=Count('id'))
        return {linha['status']: linha['quantidade'] for linha in linhas}

    def contar_criados_entre(self, inicio: datetime, fim: datetime) -> int:
        return self.PedidoModel.objects.filter(criado_em__gte=inicio, criado_em__lt=fim).count()

    def somar_total_por_status(self, status: Iterable[StatusPedido]) -> Decimal:
        valores = [StatusPedido(s).value for s in status]
        total = self.PedidoModel.objects.filter(status__in=valores).aggregate(
            total=Sum('preco_total')
        )['total']
        return total if total is not None else Decimal('0.00')
