from collections.abc import Mapping

from django.conf import settings
from rest_framework import serializers

from zenmall.core.entities import EnderecoEntrega, FiltroPedidos
from zenmall.core.status import StatusPedido

LIMITE_PADRAO = getattr(settings, 'PAGINACAO_LIMITE_PADRAO', 10)
LIMITE_MAXIMO = getattr(settings, 'PAGINACAO_LIMITE_MAXIMO', 100)

STATUS_CHOICES = [(s.value, s.rotulo) for s in StatusPedido]


# ====================================================================
# VALIDAÇÃO DE ENTRADA
# ====================================================================

class RejeitaCamposDesconhecidosMixin:
    """
    Recusa qualquer campo que o serializer não declare, inclusive nos
    serializers aninhados (cada nível valida as próprias chaves).
    """

    def to_internal_value(self, data):
        if isinstance(data, Mapping):
            permitidos = {nome for nome, campo in self.fields.items() if not campo.read_only}
            desconhecidos = sorted(set(data.keys()) - permitidos)
            if desconhecidos:
                raise serializers.ValidationError(
                    {campo: ['Campo não permitido.'] for campo in desconhecidos}
                )
        return super().to_internal_value(data)


class EnderecoEntregaSerializer(RejeitaCamposDesconhecidosMixin, serializers.Serializer):
    name = serializers.CharField(max_length=100, source='nome')
    phone = serializers.CharField(max_length=20, source='telefone')
    address = serializers.CharField(max_length=255, source='endereco')


class CriarPedidoSerializer(RejeitaCamposDesconhecidosMixin, serializers.Serializer):
    """
    Serializer para a validação dos dados de checkout.
    """
    address = EnderecoEntregaSerializer()
    remark = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)

    def to_endereco_entity(self) -> EnderecoEntrega:
        """
        Converte os dados validados do serializer para uma entidade EnderecoEntrega.
        """
        endereco = self.validated_data['address']
        return EnderecoEntrega(
            nome=endereco['nome'],
            telefone=endereco['telefone'],
            endereco=endereco['endereco'],
        )


class AtualizarStatusSerializer(RejeitaCamposDesconhecidosMixin, serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUS_CHOICES)


class AtualizarPedidoAdminSerializer(RejeitaCamposDesconhecidosMixin, serializers.Serializer):
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False)
    remark = serializers.CharField(max_length=500, required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Informe 'status' e/ou 'remark'.")
        return attrs


class AdicionarItemCarrinhoSerializer(RejeitaCamposDesconhecidosMixin, serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, default=1)


class AtualizarItemCarrinhoSerializer(RejeitaCamposDesconhecidosMixin, serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class PaginacaoSerializer(RejeitaCamposDesconhecidosMixin, serializers.Serializer):
    """Parâmetros `page` e `limit` da query string."""
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=LIMITE_MAXIMO, default=LIMITE_PADRAO)


class ListaProdutosSerializer(PaginacaoSerializer):
    category_id = serializers.IntegerField(min_value=1, required=False)


class FiltroPedidosSerializer(PaginacaoSerializer):
    order_number = serializers.CharField(max_length=36, required=False, allow_blank=True)
    user_id = serializers.IntegerField(min_value=1, required=False)
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    min_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    max_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)

    def to_filtro(self) -> FiltroPedidos:
        dados = self.validated_data
        return FiltroPedidos(
            numero_pedido=dados.get('order_number') or None,
            usuario_id=dados.get('user_id'),
            status=StatusPedido(dados['status']) if dados.get('status') else None,
            data_inicio=dados.get('start_date'),
            data_fim=dados.get('end_date'),
            valor_minimo=dados.get('min_amount'),
            valor_maximo=dados.get('max_amount'),
            pagina=dados['page'],
            limite=dados['limit'],
        )


# ====================================================================
# SERIALIZERS DE SAÍDA (a partir das entidades do Core)
# ====================================================================

class CategoriaSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(source='nome')


class ProdutoSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(source='nome')
    description = serializers.CharField(source='descricao')
    price = serializers.DecimalField(max_digits=10, decimal_places=2, source='preco')
    stock = serializers.IntegerField(source='estoque')
    status = serializers.CharField()
    category = CategoriaSerializer(source='categoria', allow_null=True)


class ResumoProdutoSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(source='nome')
    price = serializers.DecimalField(max_digits=10, decimal_places=2, source='preco')
    status = serializers.CharField()


# ====================================================================
# SERIALIZERS PARA O CARRINHO
# ====================================================================

class ItemCarrinhoSerializer(serializers.Serializer):
    """
    Serializer para o item do carrinho.
    Usa o ProdutoSerializer para representar o produto aninhado.
    """
    id = serializers.IntegerField()
    product_id = serializers.IntegerField(source='produto_id')
    quantity = serializers.IntegerField(source='quantidade')
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    product = ProdutoSerializer(source='produto', allow_null=True)


class CarrinhoSerializer(serializers.Serializer):
    """
    Serializer principal para o carrinho de compras.
    """
    id = serializers.IntegerField()
    user_id = serializers.IntegerField(source='usuario_id')
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, source='preco_total')
    items = ItemCarrinhoSerializer(many=True, source='itens')


# ====================================================================
# SERIALIZERS DE PEDIDO
# ====================================================================

class ItemPedidoSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    product_id = serializers.IntegerField(source='produto_id')
    quantity = serializers.IntegerField(source='quantidade')
    price = serializers.DecimalField(max_digits=10, decimal_places=2, source='preco')
    product = ResumoProdutoSerializer(source='produto', allow_null=True)


class PedidoSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    order_number = serializers.CharField(source='numero_pedido')
    user_id = serializers.IntegerField(source='usuario_id')
    total_price = serializers.DecimalField(max_digits=10, decimal_places=2, source='preco_total')
    status = serializers.CharField()
    remark = serializers.CharField(source='observacao', allow_null=True)
    address = EnderecoEntregaSerializer(source='endereco_entrega', allow_null=True)
    items = ItemPedidoSerializer(many=True, source='itens')
    created_at = serializers.DateTimeField(source='criado_em')
    updated_at = serializers.DateTimeField(source='atualizado_em')


class EstatisticasPedidosSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    by_status = serializers.DictField(child=serializers.IntegerField(), source='por_status')
    today = serializers.IntegerField(source='criados_hoje')
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2, source='receita_total')


def serializar_pagina(pagina, serializer_class) -> dict:
    """Representação de uma `Pagina` com a lista e os totais."""
    return {
        'items': serializer_class(pagina.itens, many=True).data,
        'total': pagina.total,
        'page': pagina.pagina,
        'limit': pagina.limite,
        'pages': pagina.paginas,
    }
