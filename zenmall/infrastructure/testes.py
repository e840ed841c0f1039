from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db.models import ProtectedError
from django.test import TestCase
from django.utils import timezone

from zenmall.carrinho.models import ItemCarrinho as ItemCarrinhoModel
from zenmall.catalog.models import Produto as ProdutoModel
from zenmall.core.entities import EnderecoEntrega, FiltroPedidos, Produto as ProdutoEntity
from zenmall.core.exceptions import (
    EstoqueInsuficienteError, ItemCarrinhoNaoEncontradoError, TransicaoIlegalError
)
from zenmall.core.status import StatusPedido
from zenmall.core.use_cases import (
    ConsultarPedidosUseCase, CriarPedidoUseCase, GerenciarCarrinhoUseCase, ReembolsarPedidoUseCase
)
from zenmall.infrastructure.repositories import PedidoRepositoryDjango, ProdutoRepositoryDjango
from zenmall.infrastructure.unit_of_work import UnidadeDeTrabalhoDjango
from zenmall.pedidos.models import ItemPedido as ItemPedidoModel, Pedido as PedidoModel


class BaseRepositorioTestCase(TestCase):

    def setUp(self):
        """
        Cria um cliente e dois produtos reais no banco de teste:
        A (10.00, estoque 5) e B (20.00, estoque 1).
        """
        self.usuario = get_user_model().objects.create_user(email='cliente@zenmall.com', password='senha-forte-123')
        self.produto_a = ProdutoModel.objects.create(
            nome='Incenso de Sândalo', descricao='100 varetas', preco=Decimal('10.00'), estoque=5
        )
        self.produto_b = ProdutoModel.objects.create(
            nome='Sutra do Coração', descricao='Edição bilíngue', preco=Decimal('20.00'), estoque=1
        )
        self.uow = UnidadeDeTrabalhoDjango()
        self.carrinho_uc = GerenciarCarrinhoUseCase()
        self.endereco = EnderecoEntrega(nome='Ana', telefone='13800000000', endereco='Rua do Templo, 1')

    def adicionar(self, produto, quantidade):
        resultado = self.carrinho_uc.adicionar_item(self.uow, self.usuario.id, produto.id, quantidade)
        self.assertTrue(resultado.ok)
        return resultado.valor

    def checkout(self):
        return CriarPedidoUseCase().executar(self.uow, self.usuario.id, endereco=self.endereco)


class ProdutoRepositoryTestCase(BaseRepositorioTestCase):

    def test_buscar_por_id_com_sucesso(self):
        """
        Cenário: Verificar se o repositório consegue encontrar um produto existente.
        """
        # ACT
        produto = ProdutoRepositoryDjango().buscar_por_id(self.produto_a.id)

        # ASSERT
        self.assertIsInstance(produto, ProdutoEntity)
        self.assertEqual(produto.nome, 'Incenso de Sândalo')
        self.assertEqual(produto.preco, Decimal('10.00'))

    def test_buscar_por_id_nao_encontrado(self):
        self.assertIsNone(ProdutoRepositoryDjango().buscar_por_id(999999))

    def test_decremento_condicional(self):
        """
        Cenário: a baixa só acontece quando há estoque suficiente.
        """
        repo = ProdutoRepositoryDjango()

        self.assertFalse(repo.decrementar_estoque(self.produto_b.id, 2))
        self.assertTrue(repo.decrementar_estoque(self.produto_b.id, 1))
        self.assertFalse(repo.decrementar_estoque(self.produto_b.id, 1))

        self.produto_b.refresh_from_db()
        self.assertEqual(self.produto_b.estoque, 0)

    def test_listar_ativos_ignora_inativos(self):
        ProdutoModel.objects.filter(pk=self.produto_b.pk).update(status='inactive')

        pagina = ProdutoRepositoryDjango().listar_ativos(pagina=1, limite=10)

        self.assertEqual(pagina.total, 1)
        self.assertEqual(pagina.itens[0].id, self.produto_a.id)


class CarrinhoRepositoryTestCase(BaseRepositorioTestCase):

    def test_total_recalculado_apos_cada_mudanca(self):
        self.adicionar(self.produto_a, 2)
        carrinho = self.adicionar(self.produto_b, 1)
        self.assertEqual(carrinho.preco_total, Decimal('40.00'))

        item_a = carrinho.itens[0]
        carrinho = self.carrinho_uc.remover_item(self.uow, self.usuario.id, item_a.id).valor
        self.assertEqual(carrinho.preco_total, Decimal('20.00'))

    def test_mesmo_produto_nao_duplica_linha(self):
        self.adicionar(self.produto_a, 1)
        self.adicionar(self.produto_a, 2)

        linhas = ItemCarrinhoModel.objects.filter(carrinho__usuario=self.usuario)
        self.assertEqual(linhas.count(), 1)
        self.assertEqual(linhas.get().quantidade, 3)

    def test_remover_item_de_outro_usuario(self):
        carrinho = self.adicionar(self.produto_a, 1)
        outro = get_user_model().objects.create_user(email='outro@zenmall.com', password='senha-forte-123')

        with self.assertRaises(ItemCarrinhoNaoEncontradoError):
            self.uow.carrinhos.remover_item(outro.id, carrinho.itens[0].id)


class CheckoutDjangoTestCase(BaseRepositorioTestCase):

    def test_checkout_grava_pedido_itens_e_baixa_estoque(self):
        """
        Cenário: 2x A + 1x B -> pedido de 40.00, A=3, B=0, carrinho vazio.
        """
        # ARRANGE
        self.adicionar(self.produto_a, 2)
        self.adicionar(self.produto_b, 1)

        # ACT
        resultado = self.checkout()

        # ASSERT
        self.assertTrue(resultado.ok)
        pedido = PedidoModel.objects.get(pk=resultado.valor.id)
        self.assertEqual(pedido.preco_total, Decimal('40.00'))
        self.assertEqual(pedido.status, StatusPedido.PENDENTE.value)
        self.assertEqual(pedido.endereco_entrega, {'name': 'Ana', 'phone': '13800000000', 'address': 'Rua do Templo, 1'})
        self.assertEqual(pedido.itens.count(), 2)

        self.produto_a.refresh_from_db()
        self.produto_b.refresh_from_db()
        self.assertEqual(self.produto_a.estoque, 3)
        self.assertEqual(self.produto_b.estoque, 0)
        self.assertFalse(ItemCarrinhoModel.objects.filter(carrinho__usuario=self.usuario).exists())
        self.assertEqual(self.usuario.carrinho.preco_total, Decimal('0.00'))

    def test_falha_de_estoque_desfaz_tudo(self):
        """
        Cenário: B zerado depois de entrar no carrinho; nada é gravado.
        """
        # ARRANGE
        self.adicionar(self.produto_a, 2)
        self.adicionar(self.produto_b, 1)
        ProdutoModel.objects.filter(pk=self.produto_b.pk).update(estoque=0)

        # ACT
        resultado = self.checkout()

        # ASSERT
        self.assertIsInstance(resultado.erro, EstoqueInsuficienteError)
        self.assertIn('Sutra do Coração', resultado.mensagem)
        self.produto_a.refresh_from_db()
        self.assertEqual(self.produto_a.estoque, 5)
        self.assertEqual(PedidoModel.objects.count(), 0)
        self.assertEqual(ItemPedidoModel.objects.count(), 0)
        self.assertEqual(ItemCarrinhoModel.objects.filter(carrinho__usuario=self.usuario).count(), 2)

    def test_excecao_dentro_da_unidade_de_trabalho_faz_rollback(self):
        with self.assertRaises(RuntimeError):
            with self.uow:
                self.uow.produtos.decrementar_estoque(self.produto_a.id, 2)
                raise RuntimeError('falha simulada')

        self.produto_a.refresh_from_db()
        self.assertEqual(self.produto_a.estoque, 5)

    def test_preco_do_pedido_e_snapshot(self):
        self.adicionar(self.produto_a, 2)
        pedido_id = self.checkout().valor.id

        ProdutoModel.objects.filter(pk=self.produto_a.pk).update(preco=Decimal('99.00'))

        pedido = self.uow.pedidos.buscar_por_id(pedido_id)
        self.assertEqual(pedido.preco_total, Decimal('20.00'))
        self.assertEqual(pedido.itens[0].preco, Decimal('10.00'))

    def test_produto_com_pedido_nao_pode_ser_apagado(self):
        self.adicionar(self.produto_a, 1)
        self.checkout()

        with self.assertRaises(ProtectedError):
            self.produto_a.delete()

    def test_reembolso_devolve_estoque(self):
        self.adicionar(self.produto_a, 2)
        pedido = self.checkout().valor
        self.uow.pedidos.atualizar_status(pedido.id, StatusPedido.PAGO)

        resultado = ReembolsarPedidoUseCase().executar(self.uow, pedido.id)

        self.assertEqual(resultado.valor.status, StatusPedido.REEMBOLSADO)
        self.produto_a.refresh_from_db()
        self.assertEqual(self.produto_a.estoque, 5)

    def test_reembolsos_concorrentes_devolvem_estoque_uma_vez(self):
        """
        Cenário: pedido pago com 2x A (estoque 3). O primeiro reembolso lê o pedido
        ainda pago, e um segundo reembolso termina antes da escrita do primeiro.
        O primeiro é recusado e o estoque volta para 5, não para 7.
        """
        # ARRANGE
        self.adicionar(self.produto_a, 2)
        pedido = self.checkout().valor
        self.uow.pedidos.atualizar_status(pedido.id, StatusPedido.PAGO)
        lido_antes = self.uow.pedidos.buscar_por_id(pedido.id)
        buscar_real = PedidoRepositoryDjango.buscar_por_id
        leituras = []

        def primeira_leitura_desatualizada(repo, pedido_id, usuario_id=None):
            leituras.append(pedido_id)
            if len(leituras) == 1:
                return lido_antes
            return buscar_real(repo, pedido_id, usuario_id=usuario_id)

        concorrente = ReembolsarPedidoUseCase().executar(UnidadeDeTrabalhoDjango(), pedido.id)

        # ACT
        with patch.object(PedidoRepositoryDjango, 'buscar_por_id', autospec=True,
                          side_effect=primeira_leitura_desatualizada):
            resultado = ReembolsarPedidoUseCase().executar(self.uow, pedido.id)

        # ASSERT
        self.assertTrue(concorrente.ok)
        self.assertIsInstance(resultado.erro, TransicaoIlegalError)
        self.assertEqual(PedidoModel.objects.get(pk=pedido.id).status, StatusPedido.REEMBOLSADO.value)
        self.produto_a.refresh_from_db()
        self.assertEqual(self.produto_a.estoque, 5)


class PedidoRepositoryTestCase(BaseRepositorioTestCase):

    def setUp(self):
        super().setUp()
        self.adicionar(self.produto_a, 1)
        self.pedido_pendente = self.checkout().valor
        self.adicionar(self.produto_b, 1)
        self.pedido_pago = self.checkout().valor
        self.uow.pedidos.atualizar_status(self.pedido_pago.id, StatusPedido.PAGO)

    def test_filtrar_por_numero_e_status(self):
        trecho = self.pedido_pago.numero_pedido[-8:].lower()

        pagina = self.uow.pedidos.filtrar(FiltroPedidos(numero_pedido=trecho, status=StatusPedido.PAGO))

        self.assertEqual(pagina.total, 1)
        self.assertEqual(pagina.itens[0].id, self.pedido_pago.id)

    def test_filtrar_por_periodo_e_valor(self):
        hoje = timezone.localdate()

        pagina = self.uow.pedidos.filtrar(FiltroPedidos(
            data_inicio=hoje, data_fim=hoje, valor_minimo=Decimal('15.00'), valor_maximo=Decimal('25.00')
        ))
        ontem = self.uow.pedidos.filtrar(FiltroPedidos(data_fim=hoje - timedelta(days=1)))

        self.assertEqual([p.id for p in pagina.itens], [self.pedido_pago.id])
        self.assertEqual(ontem.total, 0)

    def test_listagem_mais_recentes_primeiro(self):
        pedidos = self.uow.pedidos.listar_por_usuario(self.usuario.id)
        self.assertEqual([p.id for p in pedidos], [self.pedido_pago.id, self.pedido_pendente.id])

    def test_estatisticas(self):
        estatisticas = ConsultarPedidosUseCase().estatisticas(self.uow).valor

        self.assertEqual(estatisticas.total, 2)
        self.assertEqual(estatisticas.criados_hoje, 2)
        self.assertEqual(estatisticas.receita_total, Decimal('20.00'))
        self.assertEqual(estatisticas.por_status['pending'], 1)
        self.assertEqual(estatisticas.por_status['paid'], 1)
        self.assertEqual(estatisticas.por_status['completed'], 0)

    def test_deletar_remove_itens_sem_mexer_no_estoque(self):
        self.uow.pedidos.deletar(self.pedido_pendente.id)

        self.assertFalse(PedidoModel.objects.filter(pk=self.pedido_pendente.id).exists())
        self.assertFalse(ItemPedidoModel.objects.filter(pedido_id=self.pedido_pendente.id).exists())
        self.produto_a.refresh_from_db()
        self.assertEqual(self.produto_a.estoque, 4)

    def test_atualizar_status_condicional(self):
        self.assertFalse(self.uow.pedidos.atualizar_status(
            self.pedido_pendente.id, StatusPedido.ENVIADO, status_atual=StatusPedido.PAGO
        ))
        self.assertEqual(PedidoModel.objects.get(pk=self.pedido_pendente.id).status, StatusPedido.PENDENTE.value)
