"""
Repositórios e Unidade de Trabalho em memória.

NOTA: Estas implementações não usam o Django ORM e servem para testes
unitários dos casos de uso, onde o banco de dados não é necessário.
O comportamento espelha o dos repositórios Django, inclusive o rollback.
"""
import copy
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from itertools import count
from typing import Callable, Dict, Iterable, List, Optional

from zenmall.core.entities import (
    Carrinho, FiltroPedidos, ItemCarrinho, Pagina, Pedido, Produto, STATUS_PRODUTO_ATIVO
)
from zenmall.core.exceptions import ItemCarrinhoNaoEncontradoError
from zenmall.core.ports import (
    ICarrinhoRepository, IPedidoRepository, IProdutoRepository, IUnidadeDeTrabalho
)
from zenmall.core.status import StatusPedido


@dataclass
class BancoMemoria:
    """Estado compartilhado pelos repositórios em memória."""
    produtos: Dict[int, Produto] = field(default_factory=dict)
    carrinhos: Dict[int, Carrinho] = field(default_factory=dict)  # chave: usuario_id
    itens_carrinho: Dict[int, ItemCarrinho] = field(default_factory=dict)
    pedidos: Dict[int, Pedido] = field(default_factory=dict)
    sequencias: Dict[str, count] = field(default_factory=dict)

    def proximo_id(self, tabela: str) -> int:
        if tabela not in self.sequencias:
            self.sequencias[tabela] = count(1)
        return next(self.sequencias[tabela])


# ====================================================================
# REPOSITÓRIOS (Implementações In-Memory para Teste)
# ====================================================================

class ProdutoRepositoryMemoria(IProdutoRepository):
    """Implementação In-Memory para testes."""

    def __init__(self, banco: BancoMemoria):
        self.banco = banco

    def adicionar(self, produto: Produto) -> Produto:
        """Cadastra um produto diretamente no banco em memória (apoio a testes)."""
        if produto.id is None:
            produto.id = self.banco.proximo_id('produtos')
        self.banco.produtos[produto.id] = copy.deepcopy(produto)
        return produto

    def buscar_por_id(self, produto_id: int) -> Optional[Produto]:
        produto = self.banco.produtos.get(produto_id)
        return copy.deepcopy(produto) if produto else None

    def listar_ativos(self, pagina: int, limite: int, categoria_id: Optional[int] = None) -> Pagina[Produto]:
        ativos = [p for p in self.banco.produtos.values() if p.status == STATUS_PRODUTO_ATIVO]
        if categoria_id:
            ativos = [p for p in ativos if p.categoria_id == categoria_id]
        ativos.sort(key=lambda p: (p.nome, p.id))

        inicio = (pagina - 1) * limite
        return Pagina(
            itens=[copy.deepcopy(p) for p in ativos[inicio:inicio + limite]],
            total=len(ativos),
            pagina=pagina,
            limite=limite,
        )

    def decrementar_estoque(self, produto_id: int, quantidade: int) -> bool:
        produto = self.banco.produtos.get(produto_id)
        if produto is None or produto.estoque < quantidade:
            return False
        produto.estoque -= quantidade
        return True

    def incrementar_estoque(self, produto_id: int, quantidade: int) -> None:
        produto = self.banco.produtos.get(produto_id)
        if produto is not None:
            produto.estoque += quantidade


class CarrinhoRepositoryMemoria(ICarrinhoRepository):
    """Implementação In-Memory para testes."""

    def __init__(self, banco: BancoMemoria):
        self.banco = banco

    def _carrinho(self, usuario_id: int) -> Carrinho:
        if usuario_id not in self.banco.carrinhos:
            self.banco.carrinhos[usuario_id] = Carrinho(
                id=self.banco.proximo_id('carrinhos'),
                usuario_id=usuario_id,
                criado_em=datetime.now(),
            )
        return self.banco.carrinhos[usuario_id]

    def _itens(self, carrinho_id: int) -> List[ItemCarrinho]:
        itens = [i for i in self.banco.itens_carrinho.values() if i.carrinho_id == carrinho_id]
        return sorted(itens, key=lambda i: i.id)

    def _com_produto(self, item: ItemCarrinho) -> ItemCarrinho:
        completo = copy.deepcopy(item)
        produto = self.banco.produtos.get(item.produto_id)
        completo.produto = copy.deepcopy(produto) if produto else None
        return completo

    def buscar_ou_criar(self, usuario_id: int) -> Carrinho:
        carrinho = copy.deepcopy(self._carrinho(usuario_id))
        carrinho.itens = [self._com_produto(i) for i in self._itens(carrinho.id)]
        return carrinho

    def buscar_itens_por_usuario(self, usuario_id: int) -> List[ItemCarrinho]:
        carrinho = self.banco.carrinhos.get(usuario_id)
        if carrinho is None:
            return []
        return [self._com_produto(i) for i in self._itens(carrinho.id)]

    def buscar_item(self, usuario_id: int, item_id: int) -> Optional[ItemCarrinho]:
        item = self.banco.itens_carrinho.get(item_id)
        carrinho = self.banco.carrinhos.get(usuario_id)
        if item is None or carrinho is None or item.carrinho_id != carrinho.id:
            return None
        return self._com_produto(item)

    def salvar_item(self, carrinho: Carrinho, produto_id: int, quantidade: int) -> ItemCarrinho:
        existente = next(
            (i for i in self._itens(carrinho.id) if i.produto_id == produto_id), None
        )
        if existente:
            existente.quantidade = quantidade
            return self._com_produto(existente)

        item = ItemCarrinho(
            id=self.banco.proximo_id('itens_carrinho'),
            carrinho_id=carrinho.id,
            produto_id=produto_id,
            quantidade=quantidade,
        )
        self.banco.itens_carrinho[item.id] = item
        return self._com_produto(item)

    def remover_item(self, usuario_id: int, item_id: int) -> None:
        if self.buscar_item(usuario_id, item_id) is None:
            raise ItemCarrinhoNaoEncontradoError()
        del self.banco.itens_carrinho[item_id]

    def limpar_para_usuario(self, usuario_id: int) -> None:
        carrinho = self.banco.carrinhos.get(usuario_id)
        if carrinho is None:
            return
        for item in self._itens(carrinho.id):
            del self.banco.itens_carrinho[item.id]
        carrinho.preco_total = Decimal('0.00')

    def recalcular_total(self, usuario_id: int) -> Carrinho:
        carrinho = self._carrinho(usuario_id)
        total = Decimal('0.00')
        for item in self._itens(carrinho.id):
            produto = self.banco.produtos.get(item.produto_id)
            if produto is not None:
                total += produto.preco * item.quantidade
        carrinho.preco_total = total.quantize(Decimal('0.01'))
        carrinho.atualizado_em = datetime.now()
        return self.buscar_ou_criar(usuario_id)


class PedidoRepositoryMemoria(IPedidoRepository):
    """Implementação In-Memory para testes."""

    def __init__(self, banco: BancoMemoria, relogio: Callable[[], datetime] = datetime.now):
        self.banco = banco
        self.relogio = relogio

    def criar(self, pedido: Pedido) -> Pedido:
        novo = copy.deepcopy(pedido)
        novo.id = self.banco.proximo_id('pedidos')
        novo.criado_em = novo.atualizado_em = self.relogio()
        for item in novo.itens:
            item.id = self.banco.proximo_id('itens_pedido')
            item.pedido_id = novo.id
        self.banco.pedidos[novo.id] = novo
        return copy.deepcopy(novo)

    def buscar_por_id(self, pedido_id: int, usuario_id: Optional[int] = None) -> Optional[Pedido]:
        pedido = self.banco.pedidos.get(pedido_id)
        if pedido is None or (usuario_id is not None and pedido.usuario_id != usuario_id):
            return None
        return copy.deepcopy(pedido)

    def _ordenados(self) -> List[Pedido]:
        return sorted(self.banco.pedidos.values(), key=lambda p: (p.criado_em, p.id), reverse=True)

    def listar_por_usuario(self, usuario_id: int) -> List[Pedido]:
        return [copy.deepcopy(p) for p in self._ordenados() if p.usuario_id == usuario_id]

    def filtrar(self, filtro: FiltroPedidos) -> Pagina[Pedido]:
        pedidos = self._ordenados()

        if filtro.numero_pedido:
            termo = filtro.numero_pedido.lower()
            pedidos = [p for p in pedidos if termo in p.numero_pedido.lower()]
        if filtro.usuario_id is not None:
            pedidos = [p for p in pedidos if p.usuario_id == filtro.usuario_id]
        if filtro.status:
            pedidos = [p for p in pedidos if p.status == StatusPedido(filtro.status)]
        if filtro.data_inicio:
            pedidos = [p for p in pedidos if p.criado_em.date() >= filtro.data_inicio]
        if filtro.data_fim:
            pedidos = [p for p in pedidos if p.criado_em.date() <= filtro.data_fim]
        if filtro.valor_minimo is not None:
            pedidos = [p for p in pedidos if p.preco_total >= filtro.valor_minimo]
        if filtro.valor_maximo is not None:
            pedidos = [p for p in pedidos if p.preco_total <= filtro.valor_maximo]

        inicio = filtro.deslocamento
        return Pagina(
            itens=[copy.deepcopy(p) for p in pedidos[inicio:inicio + filtro.limite]],
            total=len(pedidos),
            pagina=filtro.pagina,
            limite=filtro.limite,
        )

    def atualizar_status(self, pedido_id: int, novo_status: StatusPedido,
                         status_atual: Optional[StatusPedido] = None) -> bool:
        pedido = self.banco.pedidos.get(pedido_id)
        if pedido is None or (status_atual is not None and pedido.status != status_atual):
            return False
        pedido.status = StatusPedido(novo_status)
        pedido.atualizado_em = self.relogio()
        return True

    def atualizar_observacao(self, pedido_id: int, observacao: Optional[str]) -> None:
        pedido = self.banco.pedidos[pedido_id]
        pedido.observacao = observacao
        pedido.atualizado_em = self.relogio()

    def deletar(self, pedido_id: int) -> None:
        self.banco.pedidos.pop(pedido_id, None)

    def contar_por_status(self) -> Dict[str, int]:
        contagem: Dict[str, int] = {}
        for pedido in self.banco.pedidos.values():
            contagem[pedido.status.value] = contagem.get(pedido.status.value, 0) + 1
        return contagem

    def contar_criados_entre(self, inicio: datetime, fim: datetime) -> int:
        return sum(1 for p in self.banco.pedidos.values() if inicio <= p.criado_em < fim)

    def somar_total_por_status(self, status: Iterable[StatusPedido]) -> Decimal:
        valores = {StatusPedido(s) for s in status}
        return sum(
            (p.preco_total for p in self.banco.pedidos.values() if p.status in valores),
            Decimal('0.00'),
        )


# ====================================================================
# UNIDADE DE TRABALHO (In-Memory)
# ====================================================================

class UnidadeDeTrabalhoMemoria(IUnidadeDeTrabalho):
    """
    Tira uma cópia do banco ao entrar no bloco mais externo e a restaura se
    uma exceção escapar, imitando o rollback de `transaction.atomic`.
    """

    def __init__(self, banco: Optional[BancoMemoria] = None,
                 relogio: Callable[[], datetime] = datetime.now):
        self.banco = banco or BancoMemoria()
        self.produtos = ProdutoRepositoryMemoria(self.banco)
        self.carrinhos = CarrinhoRepositoryMemoria(self.banco)
        self.pedidos = PedidoRepositoryMemoria(self.banco, relogio)
        self.confirmacoes = 0
        self.desfeitas = 0
        self._copias: List[dict] = []

    def _estado(self) -> dict:
        return copy.deepcopy({
            'produtos': self.banco.produtos,
            'carrinhos': self.banco.carrinhos,
            'itens_carrinho': self.banco.itens_carrinho,
            'pedidos': self.banco.pedidos,
        })

    def __enter__(self) -> 'UnidadeDeTrabalhoMemoria':
        self._copias.append(self._estado())
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        copia = self._copias.pop()
        if exc_type is None:
            self.confirmacoes += 1
            return None

        # Dicts substituídos no lugar: os repositórios compartilham as mesmas referências
        for nome, valor in copia.items():
            tabela = getattr(self.banco, nome)
            tabela.clear()
            tabela.update(valor)
        self.desfeitas += 1
        return None
