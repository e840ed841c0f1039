# Define os modelos para o domínio de Carrinho.

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from zenmall.catalog.models import Produto


class Carrinho(models.Model):
    """Modelo de Carrinho de Compras. Existe no máximo um por usuário."""
    usuario = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='carrinho'
    )
    # Recalculado após cada mutação dos itens (ver CarrinhoRepositoryDjango.recalcular_total)
    preco_total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Carrinho"
        verbose_name_plural = "Carrinhos"
        db_table = 'mall_cart'

    def __str__(self):
        return f"Carrinho #{self.pk} ({self.usuario})"


class ItemCarrinho(models.Model):
    """Modelo para os itens dentro do carrinho."""
    carrinho = models.ForeignKey(Carrinho, on_delete=models.CASCADE, related_name='itens')
    produto = models.ForeignKey(Produto, on_delete=models.CASCADE, related_name='itens_carrinho')
    quantidade = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Item do Carrinho"
        verbose_name_plural = "Itens do Carrinho"
        ordering = ['criado_em', 'id']
        db_table = 'mall_cart_item'
        constraints = [
            # Adicionar o mesmo produto incrementa a quantidade em vez de duplicar a linha
            models.UniqueConstraint(fields=['carrinho', 'produto'], name='carrinho_produto_unico'),
        ]

    def __str__(self):
        return f"{self.quantidade}x {self.produto.nome}"

    @property
    def subtotal(self) -> Decimal:
        return self.produto.preco * self.quantidade
