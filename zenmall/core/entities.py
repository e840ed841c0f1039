from dataclasses import dataclass, field
from decimal import Decimal
from datetime import date, datetime
from math import ceil
from typing import Dict, Generic, List, Optional, TypeVar

from zenmall.core.status import StatusPedido

# ====================================================================
# ENTIDADES CORE
# Representam os objetos de negócio puros (sem dependência do Django).
# ====================================================================

T = TypeVar('T')

STATUS_PRODUTO_ATIVO = 'active'
STATUS_PRODUTO_INATIVO = 'inactive'
STATUS_PRODUTO_SEM_ESTOQUE = 'out_of_stock'


@dataclass
class Categoria:
    """Entidade de Categoria de produtos."""
    nome: str
    id: Optional[int] = None
    descricao: Optional[str] = None
    parent_id: Optional[int] = None


@dataclass
class Produto:
    """Entidade do Produto (incenso, livro de sutras, item de culto...)."""
    nome: str
    descricao: str
    preco: Decimal
    estoque: int
    id: Optional[int] = None
    status: str = STATUS_PRODUTO_ATIVO
    categoria_id: Optional[int] = None
    categoria: Optional[Categoria] = None
    criado_em: Optional[datetime] = None
    atualizado_em: Optional[datetime] = None

    def resumo(self) -> 'ResumoProduto':
        return ResumoProduto(id=self.id, nome=self.nome, preco=self.preco, status=self.status)


@dataclass
class ResumoProduto:
    """Resumo do produto anexado a itens de carrinho e de pedido."""
    id: int
    nome: str
    preco: Decimal
    status: str = STATUS_PRODUTO_ATIVO


@dataclass
class ItemCarrinho:
    """Entidade que representa uma linha do carrinho (produto x quantidade)."""
    produto_id: int
    quantidade: int
    id: Optional[int] = None
    carrinho_id: Optional[int] = None
    produto: Optional[Produto] = None

    @property
    def subtotal(self) -> Decimal:
        """Subtotal com o preço atual do produto (zero se o produto não veio carregado)."""
        if self.produto is None:
            return Decimal('0.00')
        return self.produto.preco * self.quantidade


@dataclass
class Carrinho:
    """Entidade do Carrinho de Compras. Um por usuário."""
    usuario_id: int
    id: Optional[int] = None
    preco_total: Decimal = Decimal('0.00')
    itens: List[ItemCarrinho] = field(default_factory=list)
    criado_em: Optional[datetime] = None
    atualizado_em: Optional[datetime] = None

    def item_do_produto(self, produto_id: int) -> Optional[ItemCarrinho]:
        return next((item for item in self.itens if item.produto_id == produto_id), None)


@dataclass
class EnderecoEntrega:
    """Snapshot do endereço informado no checkout."""
    nome: str
    telefone: str
    endereco: str

    def to_dict(self) -> Dict[str, str]:
        return {'name': self.nome, 'phone': self.telefone, 'address': self.endereco}

    @classmethod
    def from_dict(cls, dados: Optional[dict]) -> Optional['EnderecoEntrega']:
        if not dados:
            return None
        return cls(
            nome=dados.get('name', ''),
            telefone=dados.get('phone', ''),
            endereco=dados.get('address', ''),
        )


@dataclass
class ItemPedido:
    """Snapshot de um item no momento da compra (imutável)."""
    produto_id: int
    quantidade: int
    preco: Decimal
    id: Optional[int] = None
    pedido_id: Optional[int] = None
    produto: Optional[ResumoProduto] = None

    @property
    def subtotal(self) -> Decimal:
        return self.preco * self.quantidade


@dataclass
class Pedido:
    """Entidade do Pedido de Venda."""
    numero_pedido: str
    usuario_id: int
    preco_total: Decimal
    status: StatusPedido = StatusPedido.PENDENTE
    itens: List[ItemPedido] = field(default_factory=list)
    endereco_entrega: Optional[EnderecoEntrega] = None
    observacao: Optional[str] = None
    id: Optional[int] = None
    criado_em: Optional[datetime] = None
    atualizado_em: Optional[datetime] = None


# ====================================================================
# OBJETOS DE CONSULTA
# ====================================================================

@dataclass
class FiltroPedidos:
    """Critérios da listagem administrativa de pedidos."""
    numero_pedido: Optional[str] = None
    usuario_id: Optional[int] = None
    status: Optional[StatusPedido] = None
    data_inicio: Optional[date] = None
    data_fim: Optional[date] = None
    valor_minimo: Optional[Decimal] = None
    valor_maximo: Optional[Decimal] = None
    pagina: int = 1
    limite: int = 10

    @property
    def deslocamento(self) -> int:
        return (self.pagina - 1) * self.limite


@dataclass
class Pagina(Generic[T]):
    """Uma página de resultados com os totais calculados."""
    itens: List[T]
    total: int
    pagina: int
    limite: int

    @property
    def paginas(self) -> int:
        if self.limite <= 0:
            return 0
        return ceil(self.total / self.limite)


@dataclass
class EstatisticasPedidos:
    """Resumo numérico dos pedidos para o painel administrativo."""
    total: int
    por_status: Dict[str, int]
    criados_hoje: int
    receita_total: Decimal
