# zenmall/core/dependency_injection.py
"""
Módulo de Injeção de Dependência (DI).
Responsável por instanciar os Use Cases e a Unidade de Trabalho concreta da
camada de Infraestrutura.

Nada é guardado em variáveis de módulo: cada requisição chama as fábricas e
recebe instâncias novas, o que permite substituí-las nos testes.
"""
from zenmall.infrastructure.unit_of_work import UnidadeDeTrabalhoDjango

from .ports import IUnidadeDeTrabalho
from .use_cases import (
    AtualizarStatusPedidoUseCase,
    CancelarPedidoUseCase,
    ConsultarPedidosUseCase,
    ConsultarProdutosUseCase,
    CriarPedidoUseCase,
    GerenciarCarrinhoUseCase,
    GerenciarPedidosAdminUseCase,
    ReembolsarPedidoUseCase,
)


# ====================================================================
# Unidade de Trabalho
# ====================================================================

def get_unidade_de_trabalho() -> IUnidadeDeTrabalho:
    return UnidadeDeTrabalhoDjango()


# ====================================================================
# Use Cases de Catálogo/Carrinho
# ====================================================================

def get_consultar_produtos_use_case() -> ConsultarProdutosUseCase:
    return ConsultarProdutosUseCase()

def get_gerenciar_carrinho_use_case() -> GerenciarCarrinhoUseCase:
    return GerenciarCarrinhoUseCase()


# ====================================================================
# Use Cases de Pedidos
# ====================================================================

def get_criar_pedido_use_case() -> CriarPedidoUseCase:
    return CriarPedidoUseCase()

def get_atualizar_status_pedido_use_case() -> AtualizarStatusPedidoUseCase:
    return AtualizarStatusPedidoUseCase()

def get_cancelar_pedido_use_case() -> CancelarPedidoUseCase:
    return CancelarPedidoUseCase()

def get_consultar_pedidos_use_case() -> ConsultarPedidosUseCase:
    return ConsultarPedidosUseCase()


# ====================================================================
# Use Cases Administrativos
# ====================================================================

def get_reembolsar_pedido_use_case() -> ReembolsarPedidoUseCase:
    return ReembolsarPedidoUseCase()

def get_gerenciar_pedidos_admin_use_case() -> GerenciarPedidosAdminUseCase:
    return GerenciarPedidosAdminUseCase()
