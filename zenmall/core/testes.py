# zenmall/core/testes.py

import unittest
from datetime import date, datetime, timedelta
from decimal import Decimal
from unittest.mock import MagicMock, patch

from zenmall.core.entities import EnderecoEntrega, FiltroPedidos, Produto
from zenmall.core.exceptions import (
    CarrinhoVazioError,
    DadosInvalidosError,
    EstadoInvalidoError,
    EstoqueInsuficienteError,
    ItemCarrinhoNaoEncontradoError,
    PedidoNaoEncontradoError,
    ProdutoNaoEncontradoError,
    TransicaoIlegalError,
)
from zenmall.core.status import StatusPedido, pode_transitar, transicoes_permitidas
from zenmall.core.use_cases import (
    AtualizarStatusPedidoUseCase,
    CancelarPedidoUseCase,
    ConsultarPedidosUseCase,
    CriarPedidoUseCase,
    GerenciarCarrinhoUseCase,
    GerenciarPedidosAdminUseCase,
    ReembolsarPedidoUseCase,
    gerar_numero_pedido,
)
from zenmall.infrastructure.memoria import UnidadeDeTrabalhoMemoria

USUARIO_ID = 1
OUTRO_USUARIO_ID = 2
ENDERECO = EnderecoEntrega(nome='Ana', telefone='13800000000', endereco='Rua do Templo, 1')


class BaseUseCaseTestCase(unittest.TestCase):
    """
    Prepara uma Unidade de Trabalho em memória com dois produtos:
    A (10.00, estoque 5) e B (20.00, estoque 1).
    """

    def setUp(self):
        self.agora = datetime(2024, 5, 20, 15, 30)
        self.uow = UnidadeDeTrabalhoMemoria(relogio=lambda: self.agora)

        self.produto_a = self.uow.produtos.adicionar(
            Produto(nome='Incenso de Sândalo', descricao='Caixa com 100 varetas', preco=Decimal('10.00'), estoque=5)
        )
        self.produto_b = self.uow.produtos.adicionar(
            Produto(nome='Sutra do Coração', descricao='Edição bilíngue', preco=Decimal('20.00'), estoque=1)
        )

        self.carrinho_uc = GerenciarCarrinhoUseCase()
        self.criar_pedido_uc = CriarPedidoUseCase()
        self.atualizar_status_uc = AtualizarStatusPedidoUseCase()

    # Helpers
    def estoque(self, produto):
        return self.uow.banco.produtos[produto.id].estoque

    def adicionar(self, produto, quantidade, usuario_id=USUARIO_ID):
        resultado = self.carrinho_uc.adicionar_item(self.uow, usuario_id, produto.id, quantidade)
        self.assertTrue(resultado.ok, getattr(resultado, 'mensagem', None))
        return resultado.valor

    def checkout(self, usuario_id=USUARIO_ID):
        return self.criar_pedido_uc.executar(self.uow, usuario_id, endereco=ENDERECO)

    def pedido_pendente(self, quantidade_a=2):
        self.adicionar(self.produto_a, quantidade_a)
        resultado = self.checkout()
        self.assertTrue(resultado.ok)
        return resultado.valor

    def mudar_status(self, pedido, *status):
        for novo in status:
            resultado = self.atualizar_status_uc.executar(self.uow, pedido.id, novo)
            self.assertTrue(resultado.ok, getattr(resultado, 'mensagem', None))
        return resultado.valor


# ====================================================================
# MÁQUINA DE ESTADOS
# ====================================================================

class TestTabelaDeTransicoes(unittest.TestCase):

    def test_transicoes_permitidas(self):
        esperado = {
            StatusPedido.PENDENTE: {StatusPedido.PAGO, StatusPedido.REEMBOLSADO},
            StatusPedido.PAGO: {StatusPedido.ENVIADO, StatusPedido.EM_REEMBOLSO},
            StatusPedido.ENVIADO: {StatusPedido.CONCLUIDO, StatusPedido.EM_REEMBOLSO},
            StatusPedido.CONCLUIDO: {StatusPedido.EM_REEMBOLSO},
            StatusPedido.EM_REEMBOLSO: {StatusPedido.REEMBOLSADO},
            StatusPedido.REEMBOLSADO: set(),
        }
        for atual, proximos in esperado.items():
            with self.subTest(atual=atual):
                self.assertEqual(set(transicoes_permitidas(atual)), proximos)

    def test_guard_aceita_valores_em_texto(self):
        self.assertTrue(pode_transitar('completed', 'refunding'))
        self.assertFalse(pode_transitar('completed', 'paid'))

    def test_reembolsado_e_terminal(self):
        for novo in StatusPedido:
            with self.subTest(novo=novo):
                self.assertFalse(pode_transitar(StatusPedido.REEMBOLSADO, novo))


# ====================================================================
# CHECKOUT
# ====================================================================

class TestCriarPedido(BaseUseCaseTestCase):

    def test_checkout_com_sucesso(self):
        """
        Cenário: 2x A (10.00) + 1x B (20.00) viram um pedido pendente de 40.00.
        """
        # ARRANGE
        self.adicionar(self.produto_a, 2)
        self.adicionar(self.produto_b, 1)

        # ACT
        resultado = self.checkout()

        # ASSERT
        self.assertTrue(resultado.ok)
        pedido = resultado.valor
        self.assertEqual(pedido.preco_total, Decimal('40.00'))
        self.assertEqual(pedido.status, StatusPedido.PENDENTE)
        self.assertEqual(len(pedido.itens), 2)
        self.assertEqual(pedido.itens[0].produto.nome, 'Incenso de Sândalo')
        self.assertEqual(pedido.endereco_entrega, ENDERECO)
        self.assertTrue(pedido.numero_pedido.startswith('ORD'))

        # Estoque baixado e carrinho vazio
        self.assertEqual(self.estoque(self.produto_a), 3)
        self.assertEqual(self.estoque(self.produto_b), 0)
        carrinho = self.carrinho_uc.obter_carrinho(self.uow, USUARIO_ID).valor
        self.assertEqual(carrinho.itens, [])
        self.assertEqual(carrinho.preco_total, Decimal('0.00'))

    def test_estoque_insuficiente_nao_altera_nada(self):
        """
        Cenário: B fica sem estoque depois de ir para o carrinho. O checkout
        falha citando B, o estoque de A fica intacto e o carrinho é mantido.
        """
        # ARRANGE
        self.adicionar(self.produto_a, 2)
        self.adicionar(self.produto_b, 1)
        self.uow.banco.produtos[self.produto_b.id].estoque = 0

        # ACT
        resultado = self.checkout()

        # ASSERT
        self.assertFalse(resultado.ok)
        self.assertIsInstance(resultado.erro, EstoqueInsuficienteError)
        self.assertEqual(resultado.erro.nome_produto, 'Sutra do Coração')
        self.assertIn('Sutra do Coração', resultado.mensagem)
        self.assertEqual(self.estoque(self.produto_a), 5)
        self.assertEqual(len(self.uow.carrinhos.buscar_itens_por_usuario(USUARIO_ID)), 2)
        self.assertEqual(self.uow.banco.pedidos, {})

    def test_baixa_condicional_recusada_desfaz_baixas_anteriores(self):
        """
        Cenário: outra compra leva o estoque de B entre a validação e a baixa.
        A baixa de A já feita precisa ser desfeita junto com o resto.
        """
        # ARRANGE
        self.adicionar(self.produto_a, 2)
        self.adicionar(self.produto_b, 1)
        decrementar_real = self.uow.produtos.decrementar_estoque

        def concorrente_levou_b(produto_id, quantidade):
            if produto_id == self.produto_b.id:
                return False
            return decrementar_real(produto_id, quantidade)

        # ACT
        with patch.object(self.uow.produtos, 'decrementar_estoque', side_effect=concorrente_levou_b):
            resultado = self.checkout()

        # ASSERT
        self.assertIsInstance(resultado.erro, EstoqueInsuficienteError)
        self.assertEqual(self.estoque(self.produto_a), 5)
        self.assertEqual(self.uow.banco.pedidos, {})
        self.assertEqual(len(self.uow.carrinhos.buscar_itens_por_usuario(USUARIO_ID)), 2)
        self.assertEqual(self.uow.desfeitas, 1)

    def test_baixa_de_estoque_em_ordem_de_produto(self):
        """
        Cenário: B entra no carrinho antes de A; a baixa segue a ordem dos IDs (A, B).
        """
        # ARRANGE
        self.adicionar(self.produto_b, 1)
        self.adicionar(self.produto_a, 1)
        ordem = []
        decrementar_real = self.uow.produtos.decrementar_estoque

        def registrar(produto_id, quantidade):
            ordem.append(produto_id)
            return decrementar_real(produto_id, quantidade)

        # ACT
        with patch.object(self.uow.produtos, 'decrementar_estoque', side_effect=registrar):
            resultado = self.checkout()

        # ASSERT
        self.assertTrue(resultado.ok)
        self.assertEqual(ordem, sorted([self.produto_a.id, self.produto_b.id]))

    def test_decremento_nunca_deixa_estoque_negativo(self):
        self.assertFalse(self.uow.produtos.decrementar_estoque(self.produto_b.id, 2))
        self.assertEqual(self.estoque(self.produto_b), 1)
        self.assertTrue(self.uow.produtos.decrementar_estoque(self.produto_b.id, 1))
        self.assertFalse(self.uow.produtos.decrementar_estoque(self.produto_b.id, 1))
        self.assertEqual(self.estoque(self.produto_b), 0)

    def test_segundo_checkout_encontra_carrinho_vazio(self):
        self.pedido_pendente()

        resultado = self.checkout()

        self.assertFalse(resultado.ok)
        self.assertIsInstance(resultado.erro, CarrinhoVazioError)
        self.assertEqual(len(self.uow.banco.pedidos), 1)

    def test_total_do_pedido_nao_muda_com_o_preco_do_produto(self):
        # ARRANGE
        pedido = self.pedido_pendente(quantidade_a=2)

        # ACT
        self.uow.banco.produtos[self.produto_a.id].preco = Decimal('99.00')

        # ASSERT
        salvo = self.uow.pedidos.buscar_por_id(pedido.id)
        self.assertEqual(salvo.preco_total, Decimal('20.00'))
        self.assertEqual(salvo.itens[0].preco, Decimal('10.00'))

    def test_produto_removido_do_catalogo(self):
        self.adicionar(self.produto_a, 1)
        del self.uow.banco.produtos[self.produto_a.id]

        resultado = self.checkout()

        self.assertIsInstance(resultado.erro, ProdutoNaoEncontradoError)

    def test_carrinho_vazio_nao_cria_pedido(self):
        """
        Cenário: com dependências simuladas, um carrinho vazio não chega a gravar nada.
        """
        # ARRANGE
        uow_mock = MagicMock()
        uow_mock.carrinhos.buscar_itens_por_usuario.return_value = []

        # ACT
        resultado = CriarPedidoUseCase(gerar_numero=lambda: 'ORD-FIXO').executar(uow_mock, USUARIO_ID)

        # ASSERT
        self.assertIsInstance(resultado.erro, CarrinhoVazioError)
        uow_mock.pedidos.criar.assert_not_called()
        uow_mock.produtos.decrementar_estoque.assert_not_called()

    def test_numero_do_pedido(self):
        numero = gerar_numero_pedido(datetime(2024, 1, 2, 3, 4, 5))
        self.assertTrue(numero.startswith('ORD20240102030405'))
        self.assertLessEqual(len(numero), 36)
        self.assertNotEqual(gerar_numero_pedido(), gerar_numero_pedido())


# ====================================================================
# STATUS, CANCELAMENTO E REEMBOLSO
# ====================================================================

class TestStatusDoPedido(BaseUseCaseTestCase):

    def test_concluido_nao_volta_para_pago(self):
        pedido = self.pedido_pendente()
        self.mudar_status(pedido, 'paid', 'shipped', 'completed')

        resultado = self.atualizar_status_uc.executar(self.uow, pedido.id, 'paid')

        self.assertIsInstance(resultado.erro, TransicaoIlegalError)
        self.assertEqual(self.uow.pedidos.buscar_por_id(pedido.id).status, StatusPedido.CONCLUIDO)

    def test_concluido_pode_entrar_em_reembolso(self):
        pedido = self.pedido_pendente()
        atualizado = self.mudar_status(pedido, 'paid', 'shipped', 'completed', 'refunding')
        self.assertEqual(atualizado.status, StatusPedido.EM_REEMBOLSO)

    def test_reembolsado_e_terminal(self):
        pedido = self.pedido_pendente()
        self.mudar_status(pedido, 'paid', 'refunding', 'refunded')

        for novo in StatusPedido:
            with self.subTest(novo=novo):
                resultado = self.atualizar_status_uc.executar(self.uow, pedido.id, novo)
                self.assertIsInstance(resultado.erro, TransicaoIlegalError)

    def test_status_desconhecido(self):
        pedido = self.pedido_pendente()
        resultado = self.atualizar_status_uc.executar(self.uow, pedido.id, 'cancelled')
        self.assertIsInstance(resultado.erro, DadosInvalidosError)

    def test_pedido_de_outro_usuario(self):
        pedido = self.pedido_pendente()
        resultado = self.atualizar_status_uc.executar(
            self.uow, pedido.id, 'paid', usuario_id=OUTRO_USUARIO_ID
        )
        self.assertIsInstance(resultado.erro, PedidoNaoEncontradoError)

    def test_reembolso_devolve_estoque(self):
        """
        Cenário: estoque 5 -> pedido de 2 (estoque 3) -> pago -> reembolsado (estoque 5).
        """
        pedido = self.pedido_pendente(quantidade_a=2)
        self.assertEqual(self.estoque(self.produto_a), 3)
        self.mudar_status(pedido, 'paid')

        resultado = ReembolsarPedidoUseCase().executar(self.uow, pedido.id)

        self.assertTrue(resultado.ok)
        self.assertEqual(resultado.valor.status, StatusPedido.REEMBOLSADO)
        self.assertEqual(self.estoque(self.produto_a), 5)

    def test_reembolso_de_pedido_em_reembolso(self):
        pedido = self.pedido_pendente(quantidade_a=2)
        self.mudar_status(pedido, 'paid', 'refunding')

        resultado = ReembolsarPedidoUseCase().executar(self.uow, pedido.id)

        self.assertEqual(resultado.valor.status, StatusPedido.REEMBOLSADO)
        self.assertEqual(self.estoque(self.produto_a), 5)

    def test_reembolso_de_pedido_pendente(self):
        pedido = self.pedido_pendente()
        resultado = ReembolsarPedidoUseCase().executar(self.uow, pedido.id)
        self.assertIsInstance(resultado.erro, EstadoInvalidoError)

    def test_reembolso_de_pedido_ja_reembolsado_nao_devolve_estoque_duas_vezes(self):
        pedido = self.pedido_pendente(quantidade_a=2)
        self.mudar_status(pedido, 'paid')
        ReembolsarPedidoUseCase().executar(self.uow, pedido.id)

        resultado = ReembolsarPedidoUseCase().executar(self.uow, pedido.id)

        self.assertIsInstance(resultado.erro, TransicaoIlegalError)
        self.assertEqual(self.estoque(self.produto_a), 5)

    def test_cancelar_pedido_pendente(self):
        pedido = self.pedido_pendente(quantidade_a=2)

        resultado = CancelarPedidoUseCase().executar(self.uow, pedido.id, usuario_id=USUARIO_ID)

        self.assertEqual(resultado.valor.status, StatusPedido.REEMBOLSADO)
        self.assertEqual(self.estoque(self.produto_a), 5)

    def test_cancelar_pedido_pago(self):
        pedido = self.pedido_pendente()
        self.mudar_status(pedido, 'paid')

        resultado = CancelarPedidoUseCase().executar(self.uow, pedido.id, usuario_id=USUARIO_ID)

        self.assertIsInstance(resultado.erro, TransicaoIlegalError)
        self.assertEqual(self.estoque(self.produto_a), 3)

    def test_status_alterado_por_outra_operacao_nao_devolve_estoque(self):
        """
        Cenário: entre a leitura e a escrita, outra operação já cancelou o pedido.
        A escrita condicional não encontra mais o status lido e nada é devolvido ao estoque.
        """
        # ARRANGE
        pedido = self.pedido_pendente(quantidade_a=2)

        # ACT
        with patch.object(self.uow.pedidos, 'atualizar_status', return_value=False):
            resultado = CancelarPedidoUseCase().executar(self.uow, pedido.id, usuario_id=USUARIO_ID)

        # ASSERT
        self.assertIsInstance(resultado.erro, TransicaoIlegalError)
        self.assertEqual(self.estoque(self.produto_a), 3)
        self.assertEqual(self.uow.desfeitas, 1)

    def test_escrita_condicional_de_status(self):
        pedido = self.pedido_pendente()

        self.assertFalse(self.uow.pedidos.atualizar_status(pedido.id, StatusPedido.ENVIADO, status_atual=StatusPedido.PAGO))
        self.assertTrue(self.uow.pedidos.atualizar_status(pedido.id, StatusPedido.PAGO, status_atual=StatusPedido.PENDENTE))
        self.assertEqual(self.uow.pedidos.buscar_por_id(pedido.id).status, StatusPedido.PAGO)


# ====================================================================
# CONSULTAS E ADMINISTRAÇÃO
# ====================================================================

class TestConsultasEAdministracao(BaseUseCaseTestCase):

    def setUp(self):
        super().setUp()
        self.consultar_uc = ConsultarPedidosUseCase(relogio=lambda: self.agora)

    def test_estatisticas(self):
        # ARRANGE: um pendente (10), um pago (20), um reembolsado (10) ontem
        pendente = self.pedido_pendente(quantidade_a=1)
        self.adicionar(self.produto_b, 1)
        pago = self.checkout().valor
        self.mudar_status(pago, 'paid')

        self.agora = self.agora - timedelta(days=1)
        reembolsado = self.pedido_pendente(quantidade_a=1)
        CancelarPedidoUseCase().executar(self.uow, reembolsado.id)
        self.agora = self.agora + timedelta(days=1)

        # ACT
        estatisticas = self.consultar_uc.estatisticas(self.uow).valor

        # ASSERT
        self.assertEqual(estatisticas.total, 3)
        self.assertEqual(estatisticas.criados_hoje, 2)
        self.assertEqual(estatisticas.receita_total, Decimal('20.00'))
        self.assertEqual(set(estatisticas.por_status), {s.value for s in StatusPedido})
        self.assertEqual(estatisticas.por_status['pending'], 1)
        self.assertEqual(estatisticas.por_status['paid'], 1)
        self.assertEqual(estatisticas.por_status['refunded'], 1)
        self.assertEqual(estatisticas.por_status['shipped'], 0)
        self.assertIsNotNone(pendente.id)

    def test_filtrar_por_status_e_valor(self):
        self.pedido_pendente(quantidade_a=1)
        self.adicionar(self.produto_a, 3)
        pago = self.checkout().valor
        self.mudar_status(pago, 'paid')

        pagina = self.consultar_uc.filtrar(
            self.uow, FiltroPedidos(status=StatusPedido.PAGO, valor_minimo=Decimal('25.00'))
        ).valor

        self.assertEqual(pagina.total, 1)
        self.assertEqual(pagina.itens[0].id, pago.id)
        self.assertEqual(pagina.paginas, 1)

    def test_filtrar_por_periodo(self):
        self.pedido_pendente(quantidade_a=1)

        hoje = self.agora.date()
        dentro = self.consultar_uc.filtrar(self.uow, FiltroPedidos(data_inicio=hoje, data_fim=hoje)).valor
        fora = self.consultar_uc.filtrar(self.uow, FiltroPedidos(data_inicio=date(2024, 6, 1))).valor

        self.assertEqual(dentro.total, 1)
        self.assertEqual(fora.total, 0)

    def test_filtro_invalido(self):
        casos = [
            FiltroPedidos(data_inicio=date(2024, 5, 2), data_fim=date(2024, 5, 1)),
            FiltroPedidos(valor_minimo=Decimal('10'), valor_maximo=Decimal('5')),
            FiltroPedidos(pagina=0),
        ]
        for filtro in casos:
            with self.subTest(filtro=filtro):
                self.assertIsInstance(self.consultar_uc.filtrar(self.uow, filtro).erro, DadosInvalidosError)

    def test_paginacao(self):
        for _ in range(3):
            self.pedido_pendente(quantidade_a=1)

        pagina = self.consultar_uc.listar_todos(self.uow, pagina=2, limite=2).valor

        self.assertEqual(pagina.total, 3)
        self.assertEqual(pagina.paginas, 2)
        self.assertEqual(len(pagina.itens), 1)

    def test_admin_atualiza_observacao_sem_mudar_status(self):
        pedido = self.pedido_pendente()

        resultado = GerenciarPedidosAdminUseCase().atualizar(self.uow, pedido.id, observacao='Embrulhar para presente')

        self.assertEqual(resultado.valor.observacao, 'Embrulhar para presente')
        self.assertEqual(resultado.valor.status, StatusPedido.PENDENTE)

    def test_admin_status_passa_pelo_guard(self):
        pedido = self.pedido_pendente()

        resultado = GerenciarPedidosAdminUseCase().atualizar(
            self.uow, pedido.id, status='completed', observacao='não deve gravar'
        )

        self.assertIsInstance(resultado.erro, TransicaoIlegalError)
        self.assertIsNone(self.uow.pedidos.buscar_por_id(pedido.id).observacao)

    def test_admin_deleta_pedido_sem_devolver_estoque(self):
        pedido = self.pedido_pendente(quantidade_a=2)

        resultado = GerenciarPedidosAdminUseCase().deletar(self.uow, pedido.id)

        self.assertTrue(resultado.ok)
        self.assertIsNone(self.uow.pedidos.buscar_por_id(pedido.id))
        self.assertEqual(self.estoque(self.produto_a), 3)
        self.assertIsInstance(
            GerenciarPedidosAdminUseCase().deletar(self.uow, pedido.id).erro, PedidoNaoEncontradoError
        )


# ====================================================================
# CARRINHO
# ====================================================================

class TestGerenciarCarrinho(BaseUseCaseTestCase):

    def test_adicionar_mesmo_produto_incrementa(self):
        self.adicionar(self.produto_a, 2)
        carrinho = self.adicionar(self.produto_a, 1)

        self.assertEqual(len(carrinho.itens), 1)
        self.assertEqual(carrinho.itens[0].quantidade, 3)
        self.assertEqual(carrinho.preco_total, Decimal('30.00'))

    def test_quantidade_acumulada_acima_do_estoque(self):
        self.adicionar(self.produto_a, 4)

        resultado = self.carrinho_uc.adicionar_item(self.uow, USUARIO_ID, self.produto_a.id, 2)

        self.assertIsInstance(resultado.erro, EstoqueInsuficienteError)
        self.assertEqual(self.uow.carrinhos.buscar_itens_por_usuario(USUARIO_ID)[0].quantidade, 4)

    def test_produto_inexistente(self):
        resultado = self.carrinho_uc.adicionar_item(self.uow, USUARIO_ID, 999, 1)
        self.assertIsInstance(resultado.erro, ProdutoNaoEncontradoError)

    def test_atualizar_e_remover_item(self):
        carrinho = self.adicionar(self.produto_a, 1)
        self.adicionar(self.produto_b, 1)
        item_id = carrinho.itens[0].id

        atualizado = self.carrinho_uc.atualizar_item(self.uow, USUARIO_ID, item_id, 3).valor
        self.assertEqual(atualizado.preco_total, Decimal('50.00'))

        restante = self.carrinho_uc.remover_item(self.uow, USUARIO_ID, item_id).valor
        self.assertEqual(len(restante.itens), 1)
        self.assertEqual(restante.preco_total, Decimal('20.00'))

    def test_item_de_outro_usuario(self):
        carrinho = self.adicionar(self.produto_a, 1)
        item_id = carrinho.itens[0].id

        resultado = self.carrinho_uc.remover_item(self.uow, OUTRO_USUARIO_ID, item_id)

        self.assertIsInstance(resultado.erro, ItemCarrinhoNaoEncontradoError)
        self.assertEqual(len(self.uow.carrinhos.buscar_itens_por_usuario(USUARIO_ID)), 1)

    def test_limpar(self):
        self.adicionar(self.produto_a, 2)

        carrinho = self.carrinho_uc.limpar(self.uow, USUARIO_ID).valor

        self.assertEqual(carrinho.itens, [])
        self.assertEqual(carrinho.preco_total, Decimal('0.00'))


if __name__ == '__main__':
    unittest.main()
