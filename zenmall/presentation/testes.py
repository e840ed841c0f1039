from decimal import Decimal
from unittest.mock import MagicMock, patch

from django.contrib import admin as django_admin
from django.contrib.auth import get_user_model
from django.contrib.messages import get_messages
from django.contrib.messages.storage.fallback import FallbackStorage
from django.test import RequestFactory
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from zenmall.carrinho.models import ItemCarrinho as ItemCarrinhoModel
from zenmall.catalog.models import Produto as ProdutoModel
from zenmall.pedidos.models import Pedido as PedidoModel
from zenmall.presentation.admin import PedidoAdmin, PedidoAdminForm

ENDERECO = {'name': 'Ana', 'phone': '13800000000', 'address': 'Rua do Templo, 1'}


class BaseAPITestCase(APITestCase):

    def setUp(self):
        Usuario = get_user_model()
        self.cliente = Usuario.objects.create_user(email='cliente@zenmall.com', password='senha-forte-123')
        self.outro_cliente = Usuario.objects.create_user(email='outro@zenmall.com', password='senha-forte-123')
        self.admin = Usuario.objects.create_user(
            email='admin@zenmall.com', password='senha-forte-123', is_staff=True
        )
        self.produto_a = ProdutoModel.objects.create(
            nome='Incenso de Sândalo', descricao='100 varetas', preco=Decimal('10.00'), estoque=5
        )
        self.produto_b = ProdutoModel.objects.create(
            nome='Sutra do Coração', descricao='Edição bilíngue', preco=Decimal('20.00'), estoque=1
        )

    def login(self, usuario):
        self.client.force_authenticate(user=usuario)

    def adicionar(self, produto, quantidade):
        resposta = self.client.post(
            reverse('carrinho'), {'product_id': produto.id, 'quantity': quantidade}, format='json'
        )
        self.assertEqual(resposta.status_code, status.HTTP_201_CREATED, resposta.data)
        return resposta

    def criar_pedido(self, **extra):
        return self.client.post(reverse('pedido-list'), {'address': ENDERECO, **extra}, format='json')

    def pedido_pendente(self, quantidade=2):
        self.adicionar(self.produto_a, quantidade)
        resposta = self.criar_pedido()
        self.assertEqual(resposta.status_code, status.HTTP_201_CREATED, resposta.data)
        return resposta.data['data']


# ====================================================================
# CATÁLOGO E CARRINHO
# ====================================================================

class CatalogoAPITestCase(BaseAPITestCase):

    def test_listagem_publica(self):
        resposta = self.client.get(reverse('produto-list'), {'page': 1, 'limit': 1})

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(resposta.data['code'], 0)
        self.assertEqual(resposta.data['data']['total'], 2)
        self.assertEqual(resposta.data['data']['pages'], 2)
        self.assertEqual(len(resposta.data['data']['items']), 1)

    def test_detalhe_inexistente(self):
        resposta = self.client.get(reverse('produto-detail', args=[999999]))

        self.assertEqual(resposta.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resposta.data['code'], 404)


class CarrinhoAPITestCase(BaseAPITestCase):

    def setUp(self):
        super().setUp()
        self.login(self.cliente)

    def test_adicionar_e_ver_carrinho(self):
        self.adicionar(self.produto_a, 2)
        self.adicionar(self.produto_b, 1)

        resposta = self.client.get(reverse('carrinho'))

        dados = resposta.data['data']
        self.assertEqual(len(dados['items']), 2)
        self.assertEqual(Decimal(dados['total_price']), Decimal('40.00'))

    def test_campo_desconhecido_e_recusado(self):
        resposta = self.client.post(
            reverse('carrinho'), {'product_id': self.produto_a.id, 'quantity': 1, 'price': '0.01'}, format='json'
        )

        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', resposta.data['data'])
        self.assertFalse(ItemCarrinhoModel.objects.exists())

    def test_estoque_insuficiente(self):
        resposta = self.client.post(
            reverse('carrinho'), {'product_id': self.produto_b.id, 'quantity': 2}, format='json'
        )

        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Sutra do Coração', resposta.data['message'])

    def test_atualizar_remover_e_limpar(self):
        item_id = self.adicionar(self.produto_a, 1).data['data']['items'][0]['id']

        resposta = self.client.put(reverse('carrinho-item', args=[item_id]), {'quantity': 3}, format='json')
        self.assertEqual(Decimal(resposta.data['data']['total_price']), Decimal('30.00'))

        resposta = self.client.delete(reverse('carrinho-item', args=[item_id]))
        self.assertEqual(resposta.data['data']['items'], [])

        self.adicionar(self.produto_b, 1)
        resposta = self.client.delete(reverse('carrinho'))
        self.assertEqual(Decimal(resposta.data['data']['total_price']), Decimal('0.00'))

    def test_item_de_outro_usuario(self):
        item_id = self.adicionar(self.produto_a, 1).data['data']['items'][0]['id']
        self.login(self.outro_cliente)

        resposta = self.client.delete(reverse('carrinho-item', args=[item_id]))

        self.assertEqual(resposta.status_code, status.HTTP_404_NOT_FOUND)


# ====================================================================
# PEDIDOS DO CLIENTE
# ====================================================================

class PedidoAPITestCase(BaseAPITestCase):

    def test_sem_autenticacao(self):
        resposta = self.criar_pedido()

        self.assertEqual(resposta.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resposta.data['code'], 401)

    def test_checkout_com_sucesso(self):
        """
        Cenário: 2x A + 1x B pelo endpoint de pedidos.
        """
        # ARRANGE
        self.login(self.cliente)
        self.adicionar(self.produto_a, 2)
        self.adicionar(self.produto_b, 1)

        # ACT
        resposta = self.criar_pedido(remark='Sem pressa')

        # ASSERT
        self.assertEqual(resposta.status_code, status.HTTP_201_CREATED)
        corpo = resposta.data
        self.assertEqual(corpo['code'], 0)
        self.assertEqual(corpo['data']['status'], 'pending')
        self.assertEqual(Decimal(corpo['data']['total_price']), Decimal('40.00'))
        self.assertEqual(corpo['data']['address'], ENDERECO)
        self.assertEqual(corpo['data']['remark'], 'Sem pressa')
        self.assertEqual(len(corpo['data']['items']), 2)
        self.assertEqual(corpo['data']['items'][0]['product']['name'], 'Incenso de Sândalo')

        self.produto_a.refresh_from_db()
        self.assertEqual(self.produto_a.estoque, 3)

    def test_carrinho_vazio(self):
        self.login(self.cliente)

        resposta = self.criar_pedido()

        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resposta.data['code'], 400)

    def test_endereco_obrigatorio_e_sem_campos_extras(self):
        self.login(self.cliente)
        self.adicionar(self.produto_a, 1)

        sem_endereco = self.client.post(reverse('pedido-list'), {}, format='json')
        campo_extra = self.client.post(
            reverse('pedido-list'), {'address': {**ENDERECO, 'zip': '100000'}}, format='json'
        )

        self.assertEqual(sem_endereco.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(campo_extra.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(PedidoModel.objects.count(), 0)

    def test_listar_e_detalhar_apenas_os_proprios(self):
        self.login(self.cliente)
        pedido = self.pedido_pendente()

        lista = self.client.get(reverse('pedido-list'))
        self.assertEqual([p['id'] for p in lista.data['data']], [pedido['id']])

        self.login(self.outro_cliente)
        self.assertEqual(self.client.get(reverse('pedido-list')).data['data'], [])
        resposta = self.client.get(reverse('pedido-detail', args=[pedido['id']]))
        self.assertEqual(resposta.status_code, status.HTTP_404_NOT_FOUND)

    def test_transicao_ilegal(self):
        self.login(self.cliente)
        pedido = self.pedido_pendente()

        resposta = self.client.put(
            reverse('pedido-status', args=[pedido['id']]), {'status': 'completed'}, format='json'
        )

        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(PedidoModel.objects.get(pk=pedido['id']).status, 'pending')

    def test_pagar_pedido(self):
        self.login(self.cliente)
        pedido = self.pedido_pendente()

        resposta = self.client.put(reverse('pedido-status', args=[pedido['id']]), {'status': 'paid'}, format='json')

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(resposta.data['data']['status'], 'paid')

    def test_cancelar_devolve_estoque(self):
        self.login(self.cliente)
        pedido = self.pedido_pendente(quantidade=2)

        resposta = self.client.post(reverse('pedido-cancel', args=[pedido['id']]))

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(resposta.data['data']['status'], 'refunded')
        self.produto_a.refresh_from_db()
        self.assertEqual(self.produto_a.estoque, 5)

    def test_erro_inesperado_vira_500_no_envelope(self):
        self.login(self.cliente)

        with patch('zenmall.core.use_cases.ConsultarPedidosUseCase.listar_do_usuario',
                   side_effect=RuntimeError('banco fora do ar')):
            with self.settings(DEBUG=False):
                resposta = self.client.get(reverse('pedido-list'))

        self.assertEqual(resposta.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(resposta.data['code'], 500)
        self.assertNotIn('error', resposta.data)


# ====================================================================
# PAINEL ADMINISTRATIVO
# ====================================================================

class PedidoAdminAPITestCase(BaseAPITestCase):

    def setUp(self):
        super().setUp()
        self.login(self.cliente)
        self.pedido = self.pedido_pendente(quantidade=2)
        self.login(self.admin)

    def test_cliente_comum_recebe_403(self):
        self.login(self.cliente)

        resposta = self.client.get(reverse('pedido-admin-list'))

        self.assertEqual(resposta.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resposta.data['code'], 403)

    def test_listar_todos(self):
        resposta = self.client.get(reverse('pedido-admin-list'), {'page': 1, 'limit': 10})

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(resposta.data['data']['total'], 1)

    def test_filtrar(self):
        resposta = self.client.get(reverse('pedido-admin-filter'), {
            'status': 'pending', 'min_amount': '15', 'max_amount': '25', 'user_id': self.cliente.id,
        })

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual([p['id'] for p in resposta.data['data']['items']], [self.pedido['id']])

    def test_filtro_com_periodo_invertido(self):
        resposta = self.client.get(reverse('pedido-admin-filter'), {
            'start_date': '2024-05-02', 'end_date': '2024-05-01',
        })
        self.assertEqual(resposta.status_code, status.HTTP_400_BAD_REQUEST)

    def test_atualizar_status_e_observacao(self):
        resposta = self.client.put(
            reverse('pedido-admin-detail', args=[self.pedido['id']]),
            {'status': 'paid', 'remark': 'Pago na loja'},
            format='json',
        )

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(resposta.data['data']['status'], 'paid')
        self.assertEqual(resposta.data['data']['remark'], 'Pago na loja')

    def test_estatisticas(self):
        self.client.put(reverse('pedido-admin-detail', args=[self.pedido['id']]), {'status': 'paid'}, format='json')

        resposta = self.client.get(reverse('pedido-admin-statistics'))

        dados = resposta.data['data']
        self.assertEqual(dados['total'], 1)
        self.assertEqual(dados['today'], 1)
        self.assertEqual(dados['by_status']['paid'], 1)
        self.assertEqual(dados['by_status']['refunding'], 0)
        self.assertEqual(Decimal(dados['revenue']), Decimal('20.00'))

    def test_reembolso(self):
        url = reverse('pedido-admin-refund', args=[self.pedido['id']])

        pendente = self.client.post(url)
        self.assertEqual(pendente.status_code, status.HTTP_400_BAD_REQUEST)

        self.client.put(reverse('pedido-admin-detail', args=[self.pedido['id']]), {'status': 'paid'}, format='json')
        resposta = self.client.post(url)

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertEqual(resposta.data['data']['status'], 'refunded')
        self.produto_a.refresh_from_db()
        self.assertEqual(self.produto_a.estoque, 5)

    def test_deletar(self):
        resposta = self.client.delete(reverse('pedido-admin-detail', args=[self.pedido['id']]))

        self.assertEqual(resposta.status_code, status.HTTP_200_OK)
        self.assertFalse(PedidoModel.objects.exists())
        self.assertEqual(
            self.client.delete(reverse('pedido-admin-detail', args=[self.pedido['id']])).status_code,
            status.HTTP_404_NOT_FOUND,
        )


# ====================================================================
# DJANGO ADMIN
# ====================================================================

class PedidoDjangoAdminTestCase(BaseAPITestCase):

    def setUp(self):
        super().setUp()
        self.login(self.cliente)
        self.pedido = PedidoModel.objects.get(pk=self.pedido_pendente()['id'])
        self.model_admin = PedidoAdmin(PedidoModel, django_admin.site)

    def requisicao(self):
        request = RequestFactory().post(f'/admin/pedidos/pedido/{self.pedido.pk}/change/')
        request.user = self.admin
        request.session = {}
        request._messages = FallbackStorage(request)
        return request

    def test_formulario_recusa_transicao_ilegal(self):
        form = PedidoAdminForm(data={'status': 'completed', 'observacao': ''}, instance=self.pedido)

        self.assertFalse(form.is_valid())
        self.assertIn('status', form.errors)

    def test_formulario_aceita_transicao_permitida(self):
        form = PedidoAdminForm(data={'status': 'paid', 'observacao': 'ok'}, instance=self.pedido)
        self.assertTrue(form.is_valid(), form.errors)

    def test_mudanca_recusada_nao_exibe_mensagem_de_sucesso(self):
        """
        Cenário: o formulário foi carregado com o pedido pendente, mas o pedido
        foi cancelado antes do envio. O caso de uso recusa a mudança para 'paid'.
        """
        # ARRANGE
        PedidoModel.objects.filter(pk=self.pedido.pk).update(status='refunded')
        self.pedido.status = 'paid'
        form = MagicMock(changed_data=['status'])
        request = self.requisicao()

        # ACT
        self.model_admin.save_model(request, self.pedido, form, change=True)
        resposta = self.model_admin.response_change(request, self.pedido)

        # ASSERT
        self.assertEqual(resposta.status_code, 302)
        mensagens = list(get_messages(request))
        self.assertEqual(len(mensagens), 1)
        self.assertEqual(mensagens[0].level_tag, 'error')
        self.assertEqual(PedidoModel.objects.get(pk=self.pedido.pk).status, 'refunded')

    def test_mudanca_aceita_passa_pelo_caso_de_uso(self):
        self.pedido.status = 'refunded'
        request = self.requisicao()

        self.model_admin.save_model(request, self.pedido, MagicMock(changed_data=['status']), change=True)

        self.assertEqual(PedidoModel.objects.get(pk=self.pedido.pk).status, 'refunded')
        self.produto_a.refresh_from_db()
        self.assertEqual(self.produto_a.estoque, 5)
        self.assertFalse(getattr(request, 'status_pedido_recusado', False))
