from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from zenmall.catalog.models import Produto
from zenmall.core.status import StatusPedido, choices_django


class Pedido(models.Model):
    """
    Modelo para pedidos de compra. Total e endereço são snapshots do checkout.
    """
    numero_pedido = models.CharField(max_length=36, unique=True, verbose_name="Número do Pedido")

    usuario = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='pedidos',
        verbose_name="Cliente"
    )

    preco_total = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="Total do Pedido")
    status = models.CharField(
        max_length=20,
        choices=choices_django(),
        default=StatusPedido.PENDENTE.value,
        db_index=True,
        verbose_name="Status"
    )
    observacao = models.TextField(blank=True, null=True, verbose_name="Observação")

    # Endereço (Snapshot/Cópia dos dados no momento da compra)
    endereco_entrega = models.JSONField(
        blank=True,
        null=True,
        verbose_name="Endereço de Entrega",
        help_text="Cópia de {name, phone, address} no momento do pedido"
    )

    criado_em = models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="Data do Pedido")
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Pedido'
        verbose_name_plural = 'Pedidos'
        ordering = ['-criado_em', '-id']
        db_table = 'mall_order'

    def __str__(self):
        return f"Pedido {self.numero_pedido} - {self.usuario} - {self.status}"


class ItemPedido(models.Model):
    """
    Modelo para os itens contidos em um pedido.
    Mantém o preço unitário do produto no momento da compra.
    """
    pedido = models.ForeignKey(Pedido, on_delete=models.CASCADE, related_name='itens')

    # PROTECT: produto referenciado por algum pedido não pode ser apagado
    produto = models.ForeignKey(
        Produto,
        on_delete=models.PROTECT,
        related_name='itens_pedido',
        verbose_name="Produto"
    )

    quantidade = models.PositiveIntegerField(validators=[MinValueValidator(1)], verbose_name="Quantidade")
    preco = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="Preço Unitário na Compra")

    class Meta:
        verbose_name = 'Item do Pedido'
        verbose_name_plural = 'Itens do Pedido'
        ordering = ['id']
        db_table = 'mall_order_item'

    def __str__(self):
        return f"{self.quantidade}x {self.produto_id} (Pedido {self.pedido.numero_pedido})"

    @property
    def subtotal(self):
        return self.preco * self.quantidade
