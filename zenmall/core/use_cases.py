# zenmall/core/use_cases.py
"""
Implementação dos Casos de Uso (Lógica de Negócio) da aplicação.
Esta camada depende apenas das Entidades e Portas (Interfaces) do Core,
garantindo o isolamento da lógica de negócio.

Todo caso de uso recebe a Unidade de Trabalho como parâmetro explícito e
devolve um `Resultado` (Sucesso/Falha) em vez de deixar exceções escaparem.
"""
import logging
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional

from zenmall.core.entities import (
    Carrinho, EnderecoEntrega, EstatisticasPedidos, FiltroPedidos, ItemPedido,
    Pagina, Pedido, Produto
)
from zenmall.core.exceptions import (
    BaseErroCore,
    CarrinhoVazioError,
    DadosInvalidosError,
    EstadoInvalidoError,
    EstoqueInsuficienteError,
    ItemCarrinhoNaoEncontradoError,
    PedidoNaoEncontradoError,
    ProdutoNaoEncontradoError,
    TransicaoIlegalError,
)
from zenmall.core.ports import IUnidadeDeTrabalho
from zenmall.core.resultado import Falha, Resultado, Sucesso
from zenmall.core.status import (
    STATUS_RECEITA, STATUS_RESTAURA_ESTOQUE, StatusPedido, pode_transitar
)

logger = logging.getLogger(__name__)

DUAS_CASAS = Decimal('0.01')

# Sentinela para distinguir "não informado" de "informado como None".
NAO_INFORMADO = object()


def gerar_numero_pedido(agora: Optional[datetime] = None) -> str:
    """Número público do pedido: prefixo, carimbo de data/hora e sufixo aleatório."""
    agora = agora or datetime.now()
    return f"ORD{agora:%Y%m%d%H%M%S}{uuid.uuid4().hex[:8].upper()}"


def _em_transacao(uow: IUnidadeDeTrabalho, operacao: Callable[[], object]) -> Resultado:
    """Executa `operacao` dentro da unidade de trabalho e converte erros do Core em Falha."""
    try:
        with uow:
            return Sucesso(operacao())
    except BaseErroCore as erro:
        return Falha(erro)


def _status(valor) -> StatusPedido:
    try:
        return StatusPedido(valor)
    except ValueError:
        raise DadosInvalidosError(f"O status '{valor}' não é um status de pedido válido.")


def _buscar_pedido(uow: IUnidadeDeTrabalho, pedido_id: int, usuario_id: Optional[int] = None) -> Pedido:
    pedido = uow.pedidos.buscar_por_id(pedido_id, usuario_id=usuario_id)
    if pedido is None:
        raise PedidoNaoEncontradoError(f"Pedido ID {pedido_id} não encontrado.")
    return pedido


def _aplicar_transicao(uow: IUnidadeDeTrabalho, pedido: Pedido, novo_status: StatusPedido) -> None:
    """Guard da máquina de estados + efeito de devolução de estoque."""
    if not pode_transitar(pedido.status, novo_status):
        raise TransicaoIlegalError(pedido.status.value, novo_status.value)

    # Zero linhas = o status mudou em outra transação depois da leitura
    if not uow.pedidos.atualizar_status(pedido.id, novo_status, status_atual=pedido.status):
        atual = uow.pedidos.buscar_por_id(pedido.id)
        raise TransicaoIlegalError(
            atual.status.value if atual else pedido.status.value, novo_status.value,
            message="O status do pedido foi alterado por outra operação.",
        )

    if novo_status in STATUS_RESTAURA_ESTOQUE:
        for item in pedido.itens:
            uow.produtos.incrementar_estoque(item.produto_id, item.quantidade)

    logger.info("Pedido %s: %s -> %s", pedido.numero_pedido, pedido.status.value, novo_status.value)
    pedido.status = novo_status


# ====================================================================
# 1. CASOS DE USO DO CATÁLOGO
# ====================================================================

class ConsultarProdutosUseCase:
    """Leitura do catálogo: listagem paginada de produtos ativos e detalhe."""

    def listar(self, uow: IUnidadeDeTrabalho, pagina: int = 1, limite: int = 10,
               categoria_id: Optional[int] = None) -> Resultado[Pagina[Produto]]:
        def operacao():
            if pagina < 1 or limite < 1:
                raise DadosInvalidosError("Página e limite devem ser positivos.")
            return uow.produtos.listar_ativos(pagina, limite, categoria_id)
        return _em_transacao(uow, operacao)

    def detalhar(self, uow: IUnidadeDeTrabalho, produto_id: int) -> Resultado[Produto]:
        def operacao():
            produto = uow.produtos.buscar_por_id(produto_id)
            if produto is None:
                raise ProdutoNaoEncontradoError(produto_id)
            return produto
        return _em_transacao(uow, operacao)


# ====================================================================
# 2. CASOS DE USO DO CARRINHO
# ====================================================================

class GerenciarCarrinhoUseCase:
    """
    Caso de Uso que centraliza a gestão do carrinho (visualizar, adicionar,
    alterar quantidade, remover, limpar). Após qualquer mutação o total do
    carrinho é recalculado na mesma transação.
    """

    def obter_carrinho(self, uow: IUnidadeDeTrabalho, usuario_id: int) -> Resultado[Carrinho]:
        return _em_transacao(uow, lambda: uow.carrinhos.buscar_ou_criar(usuario_id))

    def adicionar_item(self, uow: IUnidadeDeTrabalho, usuario_id: int, produto_id: int,
                       quantidade: int = 1) -> Resultado[Carrinho]:
        """Adiciona ou incrementa um item no carrinho, verificando estoque."""
        def operacao():
            if quantidade <= 0:
                raise DadosInvalidosError("A quantidade a adicionar deve ser positiva.")

            produto = self._produto(uow, produto_id)
            carrinho = uow.carrinhos.buscar_ou_criar(usuario_id)

            item_existente = carrinho.item_do_produto(produto_id)
            quantidade_no_carrinho = item_existente.quantidade if item_existente else 0
            quantidade_total = quantidade + quantidade_no_carrinho
            self._validar_estoque(produto, quantidade_total)

            uow.carrinhos.salvar_item(carrinho, produto_id, quantidade_total)
            return uow.carrinhos.recalcular_total(usuario_id)
        return _em_transacao(uow, operacao)

    def atualizar_item(self, uow: IUnidadeDeTrabalho, usuario_id: int, item_id: int,
                       quantidade: int) -> Resultado[Carrinho]:
        """Define a quantidade de uma linha existente do carrinho."""
        def operacao():
            if quantidade <= 0:
                raise DadosInvalidosError("A quantidade deve ser positiva.")

            item = uow.carrinhos.buscar_item(usuario_id, item_id)
            if item is None:
                raise ItemCarrinhoNaoEncontradoError()

            produto = self._produto(uow, item.produto_id)
            self._validar_estoque(produto, quantidade)

            carrinho = uow.carrinhos.buscar_ou_criar(usuario_id)
            uow.carrinhos.salvar_item(carrinho, item.produto_id, quantidade)
            return uow.carrinhos.recalcular_total(usuario_id)
        return _em_transacao(uow, operacao)

    def remover_item(self, uow: IUnidadeDeTrabalho, usuario_id: int, item_id: int) -> Resultado[Carrinho]:
        def operacao():
            if uow.carrinhos.buscar_item(usuario_id, item_id) is None:
                raise ItemCarrinhoNaoEncontradoError()
            uow.carrinhos.remover_item(usuario_id, item_id)
            return uow.carrinhos.recalcular_total(usuario_id)
        return _em_transacao(uow, operacao)

    def limpar(self, uow: IUnidadeDeTrabalho, usuario_id: int) -> Resultado[Carrinho]:
        def operacao():
            uow.carrinhos.limpar_para_usuario(usuario_id)
            return uow.carrinhos.recalcular_total(usuario_id)
        return _em_transacao(uow, operacao)

    @staticmethod
    def _produto(uow: IUnidadeDeTrabalho, produto_id: int) -> Produto:
        produto = uow.produtos.buscar_por_id(produto_id)
        if produto is None:
            raise ProdutoNaoEncontradoError(produto_id)
        return produto

    @staticmethod
    def _validar_estoque(produto: Produto, quantidade: int) -> None:
        if produto.estoque < quantidade:
            raise EstoqueInsuficienteError(
                produto_id=produto.id,
                nome_produto=produto.nome,
                estoque_atual=produto.estoque,
                quantidade_solicitada=quantidade,
            )


# ====================================================================
# 3. CASOS DE USO DE PEDIDO E CHECKOUT
# ====================================================================

class CriarPedidoUseCase:
    """
    Caso de Uso que converte o carrinho do usuário em um Pedido.

    Tudo acontece em uma única unidade de trabalho: validação de estoque,
    snapshot de preços, baixa de estoque, gravação do pedido e dos itens e
    limpeza do carrinho. Qualquer falha desfaz todos os passos.
    """

    def __init__(self, gerar_numero: Callable[[], str] = gerar_numero_pedido):
        self.gerar_numero = gerar_numero

    def executar(
        self,
        uow: IUnidadeDeTrabalho,
        usuario_id: int,
        endereco: Optional[EnderecoEntrega] = None,
        observacao: Optional[str] = None,
    ) -> Resultado[Pedido]:
        """Processa o checkout."""
        resultado = _em_transacao(uow, lambda: self._checkout(uow, usuario_id, endereco, observacao))

        if resultado.ok:
            pedido = resultado.valor
            logger.info("Pedido %s criado para o usuário %s (total %s).",
                        pedido.numero_pedido, usuario_id, pedido.preco_total)
        else:
            logger.info("Checkout recusado para o usuário %s: %s", usuario_id, resultado.mensagem)
        return resultado

    def _checkout(self, uow, usuario_id, endereco, observacao) -> Pedido:
        # 1. Linhas do carrinho
        itens_carrinho = uow.carrinhos.buscar_itens_por_usuario(usuario_id)
        if not itens_carrinho:
            raise CarrinhoVazioError()

        # 2. Checagem de existência e estoque de todas as linhas antes de escrever
        produtos = {}
        for item in itens_carrinho:
            produto = uow.produtos.buscar_por_id(item.produto_id)
            if produto is None:
                raise ProdutoNaoEncontradoError(item.produto_id)
            if produto.estoque < item.quantidade:
                raise EstoqueInsuficienteError(
                    produto_id=produto.id,
                    nome_produto=produto.nome,
                    estoque_atual=produto.estoque,
                    quantidade_solicitada=item.quantidade,
                )
            produtos[item.produto_id] = produto

        # 3. Total com o preço atual (vira o snapshot imutável do pedido)
        total = sum(
            (produtos[item.produto_id].preco * item.quantidade for item in itens_carrinho),
            Decimal('0.00'),
        ).quantize(DUAS_CASAS)

        # 4. Baixa condicional de estoque; zero linhas afetadas = alguém comprou antes.
        #    Sempre na ordem de produto_id, para checkouts concorrentes travarem as linhas na mesma ordem.
        for item in sorted(itens_carrinho, key=lambda i: i.produto_id):
            if not uow.produtos.decrementar_estoque(item.produto_id, item.quantidade):
                produto = uow.produtos.buscar_por_id(item.produto_id) or produtos[item.produto_id]
                raise EstoqueInsuficienteError(
                    produto_id=produto.id,
                    nome_produto=produto.nome,
                    estoque_atual=produto.estoque,
                    quantidade_solicitada=item.quantidade,
                )

        # 5 e 6. Pedido pendente + um ItemPedido por linha
        pedido = Pedido(
            numero_pedido=self.gerar_numero(),
            usuario_id=usuario_id,
            preco_total=total,
            status=StatusPedido.PENDENTE,
            endereco_entrega=endereco,
            observacao=observacao,
            itens=[
                ItemPedido(
                    produto_id=item.produto_id,
                    quantidade=item.quantidade,
                    preco=produtos[item.produto_id].preco,
                    produto=produtos[item.produto_id].resumo(),
                )
                for item in itens_carrinho
            ],
        )
        pedido_criado = uow.pedidos.criar(pedido)

        # 7. Esvazia o carrinho
        uow.carrinhos.limpar_para_usuario(usuario_id)
        return pedido_criado


class AtualizarStatusPedidoUseCase:
    """
    Aplica uma mudança de status protegida pela tabela de transições.
    Entrar em `refunded` devolve o estoque de todos os itens na mesma transação.
    """

    def executar(self, uow: IUnidadeDeTrabalho, pedido_id: int, novo_status,
                 usuario_id: Optional[int] = None) -> Resultado[Pedido]:
        def operacao():
            status = _status(novo_status)
            pedido = _buscar_pedido(uow, pedido_id, usuario_id)
            _aplicar_transicao(uow, pedido, status)
            return _buscar_pedido(uow, pedido_id)
        return _em_transacao(uow, operacao)


class CancelarPedidoUseCase:
    """Cancelamento antes do pagamento: `pending -> refunded`, devolvendo o estoque."""

    def executar(self, uow: IUnidadeDeTrabalho, pedido_id: int,
                 usuario_id: Optional[int] = None) -> Resultado[Pedido]:
        def operacao():
            pedido = _buscar_pedido(uow, pedido_id, usuario_id)
            if pedido.status != StatusPedido.PENDENTE:
                raise TransicaoIlegalError(
                    pedido.status.value, StatusPedido.REEMBOLSADO.value,
                    message="Apenas pedidos pendentes podem ser cancelados.",
                )
            _aplicar_transicao(uow, pedido, StatusPedido.REEMBOLSADO)
            return _buscar_pedido(uow, pedido_id)
        return _em_transacao(uow, operacao)


class ReembolsarPedidoUseCase:
    """
    Reembolso administrativo: força `-> refunding` e em seguida `-> refunded`,
    com devolução de estoque. Pedidos pendentes não têm pagamento a reembolsar.
    """

    def executar(self, uow: IUnidadeDeTrabalho, pedido_id: int) -> Resultado[Pedido]:
        def operacao():
            pedido = _buscar_pedido(uow, pedido_id)
            if pedido.status == StatusPedido.PENDENTE:
                raise EstadoInvalidoError(
                    "Pedido pendente não possui pagamento a reembolsar; use o cancelamento."
                )
            if pedido.status != StatusPedido.EM_REEMBOLSO:
                _aplicar_transicao(uow, pedido, StatusPedido.EM_REEMBOLSO)
            _aplicar_transicao(uow, pedido, StatusPedido.REEMBOLSADO)
            return _buscar_pedido(uow, pedido_id)

        resultado = _em_transacao(uow, operacao)
        if resultado.ok:
            logger.info("Pedido ID %s reembolsado.", pedido_id)
        return resultado


class ConsultarPedidosUseCase:
    """Consultas de pedidos (cliente e administrativas) e estatísticas."""

    def __init__(self, relogio: Callable[[], datetime] = lambda: datetime.now().astimezone()):
        self.relogio = relogio

    def listar_do_usuario(self, uow: IUnidadeDeTrabalho, usuario_id: int) -> Resultado[List[Pedido]]:
        """Retorna os pedidos do usuário, mais recentes primeiro."""
        return _em_transacao(uow, lambda: uow.pedidos.listar_por_usuario(usuario_id))

    def detalhar(self, uow: IUnidadeDeTrabalho, pedido_id: int,
                 usuario_id: Optional[int] = None) -> Resultado[Pedido]:
        return _em_transacao(uow, lambda: _buscar_pedido(uow, pedido_id, usuario_id))

    def listar_todos(self, uow: IUnidadeDeTrabalho, pagina: int = 1, limite: int = 10) -> Resultado[Pagina[Pedido]]:
        return self.filtrar(uow, FiltroPedidos(pagina=pagina, limite=limite))

    def filtrar(self, uow: IUnidadeDeTrabalho, filtro: FiltroPedidos) -> Resultado[Pagina[Pedido]]:
        def operacao():
            self._validar_filtro(filtro)
            return uow.pedidos.filtrar(filtro)
        return _em_transacao(uow, operacao)

    def estatisticas(self, uow: IUnidadeDeTrabalho) -> Resultado[EstatisticasPedidos]:
        def operacao():
            agora = self.relogio()
            inicio_do_dia = agora.replace(hour=0, minute=0, second=0, microsecond=0)
            fim_do_dia = inicio_do_dia + timedelta(days=1)

            contagem = uow.pedidos.contar_por_status()
            por_status = {status.value: contagem.get(status.value, 0) for status in StatusPedido}

            return EstatisticasPedidos(
                total=sum(por_status.values()),
                por_status=por_status,
                criados_hoje=uow.pedidos.contar_criados_entre(inicio_do_dia, fim_do_dia),
                receita_total=uow.pedidos.somar_total_por_status(STATUS_RECEITA).quantize(DUAS_CASAS),
            )
        return _em_transacao(uow, operacao)

    @staticmethod
    def _validar_filtro(filtro: FiltroPedidos) -> None:
        if filtro.pagina < 1 or filtro.limite < 1:
            raise DadosInvalidosError("Página e limite devem ser positivos.")
        if filtro.data_inicio and filtro.data_fim and filtro.data_inicio > filtro.data_fim:
            raise DadosInvalidosError("A data inicial não pode ser posterior à data final.")
        if (filtro.valor_minimo is not None and filtro.valor_maximo is not None
                and filtro.valor_minimo > filtro.valor_maximo):
            raise DadosInvalidosError("O valor mínimo não pode ser maior que o valor máximo.")


# ====================================================================
# 4. CASOS DE USO ADMINISTRATIVOS
# ====================================================================

class GerenciarPedidosAdminUseCase:
    """Atualização e remoção de pedidos (acesso administrativo)."""

    def atualizar(self, uow: IUnidadeDeTrabalho, pedido_id: int, status=None,
                  observacao=NAO_INFORMADO) -> Resultado[Pedido]:
        """
        Atualiza a observação e/ou o status. O status passa pelo mesmo guard
        (e pelos mesmos efeitos de estoque) que a atualização do cliente.
        """
        def operacao():
            pedido = _buscar_pedido(uow, pedido_id)
            if observacao is not NAO_INFORMADO:
                uow.pedidos.atualizar_observacao(pedido.id, observacao)
            if status is not None:
                _aplicar_transicao(uow, pedido, _status(status))
            return _buscar_pedido(uow, pedido_id)
        return _em_transacao(uow, operacao)

    def deletar(self, uow: IUnidadeDeTrabalho, pedido_id: int) -> Resultado[None]:
        """Remove o pedido e seus itens. O estoque não é alterado."""
        def operacao():
            pedido = _buscar_pedido(uow, pedido_id)
            uow.pedidos.deletar(pedido.id)
            logger.warning("Pedido %s removido pelo painel administrativo.", pedido.numero_pedido)
        return _em_transacao(uow, operacao)
