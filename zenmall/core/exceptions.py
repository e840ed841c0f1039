class BaseErroCore(Exception):
    """Classe base para todas as exceções da Camada Core."""
    message = "Erro de negócio."

    def __init__(self, message=None):
        self.message = message or self.message
        super().__init__(self.message)


class DadosInvalidosError(BaseErroCore):
    """Erro levantado quando dados inválidos são fornecidos."""
    message = "Os dados fornecidos são inválidos."


# ===============================================
# ERROS DE PERSISTÊNCIA E ENTIDADE
# ===============================================

class ItemNaoEncontradoError(BaseErroCore):
    """Erro levantado quando um item (genérico) não é encontrado."""
    message = "O item solicitado não foi encontrado."


class ProdutoNaoEncontradoError(ItemNaoEncontradoError):
    """Erro levantado quando um produto específico não é encontrado."""

    def __init__(self, produto_id=None, message=None):
        self.produto_id = produto_id
        if message is None:
            message = (f"Produto ID {produto_id} não encontrado." if produto_id is not None
                       else "O produto solicitado não foi encontrado.")
        super().__init__(message)


class PedidoNaoEncontradoError(ItemNaoEncontradoError):
    """Erro específico para Pedidos não encontrados."""
    message = "Pedido não encontrado."


class ItemCarrinhoNaoEncontradoError(ItemNaoEncontradoError):
    """Linha de carrinho inexistente ou de outro usuário."""
    message = "Item não encontrado no carrinho."


class EstoqueInsuficienteError(BaseErroCore):
    """Erro levantado quando a quantidade solicitada excede o estoque."""

    def __init__(self, produto_id, nome_produto: str, estoque_atual: int,
                 quantidade_solicitada: int, message=None):
        self.produto_id = produto_id
        self.nome_produto = nome_produto
        self.estoque_atual = estoque_atual
        self.quantidade_solicitada = quantidade_solicitada
        if message is None:
            message = (f'Estoque insuficiente para o produto "{nome_produto}". '
                       f"Disponível: {estoque_atual}, Solicitado: {quantidade_solicitada}.")
        super().__init__(message)


# ===============================================
# ERROS DE FLUXO DE COMPRA E STATUS
# ===============================================

class CarrinhoVazioError(BaseErroCore):
    """Erro levantado ao tentar fazer checkout com carrinho vazio."""
    message = "O carrinho está vazio, não é possível criar o pedido."


class TransicaoIlegalError(BaseErroCore):
    """Mudança de status não permitida a partir do status atual."""

    def __init__(self, status_atual, status_novo, message=None):
        self.status_atual = status_atual
        self.status_novo = status_novo
        if message is None:
            message = f"Transição de status ilegal: '{status_atual}' -> '{status_novo}'."
        super().__init__(message)


class EstadoInvalidoError(BaseErroCore):
    """A operação não faz sentido no estado atual do pedido (ex: reembolsar pedido pendente)."""
    message = "O pedido não está em um estado válido para esta operação."
