from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal

from zenmall.core.entities import (
    STATUS_PRODUTO_ATIVO, STATUS_PRODUTO_INATIVO, STATUS_PRODUTO_SEM_ESTOQUE
)

# ====================================================================
# 1. Categoria
# ====================================================================

class Categoria(models.Model):
    """Modelo para agrupar produtos (Ex: Incensos, Livros de Sutras, Rosários)."""
    nome = models.CharField(max_length=100, unique=True, verbose_name="Nome da Categoria")
    descricao = models.TextField(blank=True, verbose_name="Descrição")
    parent = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='filhas',
        verbose_name="Categoria Pai"
    )

    class Meta:
        verbose_name = "Categoria"
        verbose_name_plural = "Categorias"
        db_table = 'product_categories'
        ordering = ['nome']

    def __str__(self):
        return self.nome


# ====================================================================
# 2. Produto
# ====================================================================

class Produto(models.Model):
    """Modelo para representar um produto do catálogo, com preço e estoque."""

    STATUS_CHOICES = [
        (STATUS_PRODUTO_ATIVO, 'Ativo'),
        (STATUS_PRODUTO_INATIVO, 'Inativo'),
        (STATUS_PRODUTO_SEM_ESTOQUE, 'Sem Estoque'),
    ]

    categoria = models.ForeignKey(
        Categoria,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='produtos'
    )

    nome = models.CharField(max_length=255, verbose_name="Nome do Produto")
    descricao = models.TextField(verbose_name="Descrição Detalhada")

    # Preço, Estoque e Disponibilidade
    preco = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name="Preço de Venda"
    )
    estoque = models.PositiveIntegerField(default=0, verbose_name="Estoque Atual")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PRODUTO_ATIVO)

    # Datas
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Produto"
        verbose_name_plural = "Produtos"
        ordering = ['nome']
        db_table = 'products'
        constraints = [
            models.CheckConstraint(condition=models.Q(estoque__gte=0), name='produto_estoque_nao_negativo'),
            models.CheckConstraint(condition=models.Q(preco__gte=0), name='produto_preco_nao_negativo'),
        ]

    def __str__(self):
        return self.nome

    @property
    def preco_formatado(self):
        return f"¥ {self.preco:,.2f}"
