# zenmall/presentation/views.py
"""
Views da API do cliente: catálogo, carrinho e pedidos do usuário logado.

As views apenas validam a entrada, montam a Unidade de Trabalho e o caso de
uso pelas fábricas de DI e convertem o `Resultado` para o envelope HTTP.
"""
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView

from zenmall.core import dependency_injection as di

from .respostas import resposta_falha, resposta_sucesso
from .serializers import (
    AdicionarItemCarrinhoSerializer,
    AtualizarItemCarrinhoSerializer,
    AtualizarStatusSerializer,
    CarrinhoSerializer,
    CriarPedidoSerializer,
    ListaProdutosSerializer,
    PedidoSerializer,
    ProdutoSerializer,
    serializar_pagina,
)


def responder(resultado, serializar, message='success', http_status=status.HTTP_200_OK):
    """Sucesso -> envelope com `serializar(valor)`; Falha -> erro mapeado."""
    if not resultado.ok:
        return resposta_falha(resultado)
    return resposta_sucesso(serializar(resultado.valor), message=message, http_status=http_status)


# ====================================================================
# CATÁLOGO
# ====================================================================

class ProdutoListAPIView(APIView):
    """Lista paginada dos produtos ativos."""
    permission_classes = [AllowAny]

    @extend_schema(
        parameters=[
            OpenApiParameter('page', int), OpenApiParameter('limit', int),
            OpenApiParameter('category_id', int),
        ],
    )
    def get(self, request):
        params = ListaProdutosSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        resultado = di.get_consultar_produtos_use_case().listar(
            di.get_unidade_de_trabalho(),
            pagina=params.validated_data['page'],
            limite=params.validated_data['limit'],
            categoria_id=params.validated_data.get('category_id'),
        )
        return responder(resultado, lambda pagina: serializar_pagina(pagina, ProdutoSerializer))


class ProdutoDetailAPIView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(responses=ProdutoSerializer)
    def get(self, request, pk):
        resultado = di.get_consultar_produtos_use_case().detalhar(di.get_unidade_de_trabalho(), pk)
        return responder(resultado, lambda produto: ProdutoSerializer(produto).data)


# ====================================================================
# CARRINHO
# ====================================================================

class CarrinhoAPIView(APIView):
    """
    API View para gerenciar o carrinho do usuário logado.
    Permite visualizar, adicionar itens e esvaziar o carrinho.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(responses=CarrinhoSerializer)
    def get(self, request):
        resultado = di.get_gerenciar_carrinho_use_case().obter_carrinho(
            di.get_unidade_de_trabalho(), request.user.id
        )
        return responder(resultado, lambda carrinho: CarrinhoSerializer(carrinho).data)

    @extend_schema(request=AdicionarItemCarrinhoSerializer, responses={201: CarrinhoSerializer})
    def post(self, request):
        """
        Adiciona um item ao carrinho.
        Espera um JSON com 'product_id' e 'quantity'.
        """
        serializer = AdicionarItemCarrinhoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        resultado = di.get_gerenciar_carrinho_use_case().adicionar_item(
            di.get_unidade_de_trabalho(),
            request.user.id,
            produto_id=serializer.validated_data['product_id'],
            quantidade=serializer.validated_data['quantity'],
        )
        return responder(
            resultado, lambda carrinho: CarrinhoSerializer(carrinho).data,
            message='Item adicionado ao carrinho.', http_status=status.HTTP_201_CREATED,
        )

    @extend_schema(responses=CarrinhoSerializer)
    def delete(self, request):
        """Esvazia o carrinho."""
        resultado = di.get_gerenciar_carrinho_use_case().limpar(di.get_unidade_de_trabalho(), request.user.id)
        return responder(resultado, lambda carrinho: CarrinhoSerializer(carrinho).data, message='Carrinho esvaziado.')


class ItemCarrinhoAPIView(APIView):
    """Altera a quantidade ou remove uma linha do carrinho do usuário."""
    permission_classes = [IsAuthenticated]

    @extend_schema(request=AtualizarItemCarrinhoSerializer, responses=CarrinhoSerializer)
    def put(self, request, item_id):
        serializer = AtualizarItemCarrinhoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        resultado = di.get_gerenciar_carrinho_use_case().atualizar_item(
            di.get_unidade_de_trabalho(), request.user.id, item_id,
            quantidade=serializer.validated_data['quantity'],
        )
        return responder(resultado, lambda carrinho: CarrinhoSerializer(carrinho).data)

    @extend_schema(responses=CarrinhoSerializer)
    def delete(self, request, item_id):
        resultado = di.get_gerenciar_carrinho_use_case().remover_item(
            di.get_unidade_de_trabalho(), request.user.id, item_id
        )
        return responder(resultado, lambda carrinho: CarrinhoSerializer(carrinho).data, message='Item removido.')


# ====================================================================
# PEDIDOS DO CLIENTE
# ====================================================================

class PedidoListCreateAPIView(APIView):
    """
    API View para listar os pedidos do usuário e processar o checkout.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(responses=PedidoSerializer(many=True))
    def get(self, request):
        resultado = di.get_consultar_pedidos_use_case().listar_do_usuario(
            di.get_unidade_de_trabalho(), request.user.id
        )
        return responder(resultado, lambda pedidos: PedidoSerializer(pedidos, many=True).data)

    @extend_schema(request=CriarPedidoSerializer, responses={201: PedidoSerializer})
    def post(self, request):
        serializer = CriarPedidoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        resultado = di.get_criar_pedido_use_case().executar(
            di.get_unidade_de_trabalho(),
            request.user.id,
            endereco=serializer.to_endereco_entity(),
            observacao=serializer.validated_data.get('remark'),
        )
        return responder(
            resultado, lambda pedido: PedidoSerializer(pedido).data,
            message='Pedido criado com sucesso!', http_status=status.HTTP_201_CREATED,
        )


class PedidoDetailAPIView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses=PedidoSerializer)
    def get(self, request, pk):
        resultado = di.get_consultar_pedidos_use_case().detalhar(
            di.get_unidade_de_trabalho(), pk, usuario_id=request.user.id
        )
        return responder(resultado, lambda pedido: PedidoSerializer(pedido).data)


class PedidoStatusAPIView(APIView):
    """Mudança de status de um pedido do próprio usuário, sujeita à tabela de transições."""
    permission_classes = [IsAuthenticated]

    @extend_schema(request=AtualizarStatusSerializer, responses=PedidoSerializer)
    def put(self, request, pk):
        serializer = AtualizarStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        resultado = di.get_atualizar_status_pedido_use_case().executar(
            di.get_unidade_de_trabalho(), pk, serializer.validated_data['status'],
            usuario_id=request.user.id,
        )
        return responder(resultado, lambda pedido: PedidoSerializer(pedido).data, message='Status atualizado.')


class PedidoCancelarAPIView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses=PedidoSerializer)
    def post(self, request, pk):
        resultado = di.get_cancelar_pedido_use_case().executar(
            di.get_unidade_de_trabalho(), pk, usuario_id=request.user.id
        )
        return responder(resultado, lambda pedido: PedidoSerializer(pedido).data, message='Pedido cancelado.')
