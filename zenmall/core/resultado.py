# zenmall/core/resultado.py
"""
Tipos de retorno explícitos dos Casos de Uso.

Os casos de uso nunca deixam escapar erros de negócio: devolvem `Sucesso`
com o valor ou `Falha` com a exceção do Core que descreve o problema.
A tradução para códigos HTTP acontece apenas na camada de apresentação.
"""
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from zenmall.core.exceptions import BaseErroCore

T = TypeVar('T')


@dataclass(frozen=True)
class Sucesso(Generic[T]):
    valor: T
    ok = True


@dataclass(frozen=True)
class Falha:
    erro: BaseErroCore
    ok = False

    @property
    def mensagem(self) -> str:
        return self.erro.message


Resultado = Union[Sucesso[T], Falha]
