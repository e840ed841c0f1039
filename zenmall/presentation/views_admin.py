# zenmall/presentation/views_admin.py
"""
API administrativa de pedidos. Todas as views exigem `is_staff`.
"""
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import IsAdminUser
from rest_framework.views import APIView

from zenmall.core import dependency_injection as di
from zenmall.core.use_cases import NAO_INFORMADO

from .serializers import (
    AtualizarPedidoAdminSerializer,
    EstatisticasPedidosSerializer,
    FiltroPedidosSerializer,
    PaginacaoSerializer,
    PedidoSerializer,
    serializar_pagina,
)
from .views import responder


class PedidoAdminListAPIView(APIView):
    """Lista paginada de todos os pedidos."""
    permission_classes = [IsAdminUser]

    @extend_schema(parameters=[OpenApiParameter('page', int), OpenApiParameter('limit', int)])
    def get(self, request):
        params = PaginacaoSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        resultado = di.get_consultar_pedidos_use_case().listar_todos(
            di.get_unidade_de_trabalho(),
            pagina=params.validated_data['page'],
            limite=params.validated_data['limit'],
        )
        return responder(resultado, lambda pagina: serializar_pagina(pagina, PedidoSerializer))


class PedidoAdminFiltroAPIView(APIView):
    """Busca de pedidos por número, usuário, status, período e faixa de valor."""
    permission_classes = [IsAdminUser]

    @extend_schema(parameters=[FiltroPedidosSerializer])
    def get(self, request):
        params = FiltroPedidosSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        resultado = di.get_consultar_pedidos_use_case().filtrar(
            di.get_unidade_de_trabalho(), params.to_filtro()
        )
        return responder(resultado, lambda pagina: serializar_pagina(pagina, PedidoSerializer))


class PedidoAdminDetailAPIView(APIView):
    """Atualização (status e/ou observação) e remoção de um pedido."""
    permission_classes = [IsAdminUser]

    @extend_schema(responses=PedidoSerializer)
    def get(self, request, pk):
        resultado = di.get_consultar_pedidos_use_case().detalhar(di.get_unidade_de_trabalho(), pk)
        return responder(resultado, lambda pedido: PedidoSerializer(pedido).data)

    @extend_schema(request=AtualizarPedidoAdminSerializer, responses=PedidoSerializer)
    def put(self, request, pk):
        serializer = AtualizarPedidoAdminSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        resultado = di.get_gerenciar_pedidos_admin_use_case().atualizar(
            di.get_unidade_de_trabalho(),
            pk,
            status=serializer.validated_data.get('status'),
            observacao=serializer.validated_data.get('remark', NAO_INFORMADO),
        )
        return responder(resultado, lambda pedido: PedidoSerializer(pedido).data, message='Pedido atualizado.')

    @extend_schema(responses=None)
    def delete(self, request, pk):
        resultado = di.get_gerenciar_pedidos_admin_use_case().deletar(di.get_unidade_de_trabalho(), pk)
        return responder(resultado, lambda _: None, message='Pedido removido.')


class PedidoAdminEstatisticasAPIView(APIView):
    permission_classes = [IsAdminUser]

    @extend_schema(responses=EstatisticasPedidosSerializer)
    def get(self, request):
        resultado = di.get_consultar_pedidos_use_case().estatisticas(di.get_unidade_de_trabalho())
        return responder(resultado, lambda estatisticas: EstatisticasPedidosSerializer(estatisticas).data)


class PedidoAdminReembolsoAPIView(APIView):
    """Reembolso: `-> refunding -> refunded`, devolvendo o estoque."""
    permission_classes = [IsAdminUser]

    @extend_schema(request=None, responses=PedidoSerializer)
    def post(self, request, pk):
        resultado = di.get_reembolsar_pedido_use_case().executar(di.get_unidade_de_trabalho(), pk)
        return responder(resultado, lambda pedido: PedidoSerializer(pedido).data, message='Pedido reembolsado.')
