# zenmall/presentation/respostas.py
"""
Envelope padrão das respostas da API: `{code, message, data, error?}`.

`code` é 0 em caso de sucesso e igual ao status HTTP em caso de erro.
Aqui também mora a única tradução de erros do Core para códigos HTTP.
"""
import logging

from django.conf import settings
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from zenmall.core.exceptions import (
    BaseErroCore,
    CarrinhoVazioError,
    DadosInvalidosError,
    EstadoInvalidoError,
    EstoqueInsuficienteError,
    ItemNaoEncontradoError,
    TransicaoIlegalError,
)
from zenmall.core.resultado import Falha

logger = logging.getLogger(__name__)

# Ordem importa: a primeira classe compatível define o status
MAPA_ERROS_HTTP = (
    (ItemNaoEncontradoError, status.HTTP_404_NOT_FOUND),
    (DadosInvalidosError, status.HTTP_400_BAD_REQUEST),
    (CarrinhoVazioError, status.HTTP_400_BAD_REQUEST),
    (EstoqueInsuficienteError, status.HTTP_400_BAD_REQUEST),
    (TransicaoIlegalError, status.HTTP_400_BAD_REQUEST),
    (EstadoInvalidoError, status.HTTP_400_BAD_REQUEST),
)


def envelope(data=None, message='success', code=0, error=None) -> dict:
    corpo = {'code': code, 'message': message, 'data': data}
    if error is not None:
        corpo['error'] = error
    return corpo


def resposta_sucesso(data=None, message='success', http_status=status.HTTP_200_OK) -> Response:
    return Response(envelope(data=data, message=message), status=http_status)


def resposta_erro(message: str, http_status: int, data=None, error=None) -> Response:
    return Response(envelope(data=data, message=message, code=http_status, error=error), status=http_status)


def status_http_do_erro(erro: BaseErroCore) -> int:
    for classe, http_status in MAPA_ERROS_HTTP:
        if isinstance(erro, classe):
            return http_status
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def resposta_falha(falha: Falha) -> Response:
    """Converte a Falha de um caso de uso na resposta HTTP correspondente."""
    http_status = status_http_do_erro(falha.erro)
    if http_status >= 500:
        logger.error("Erro de negócio sem mapeamento HTTP: %r", falha.erro)
    return resposta_erro(falha.mensagem, http_status)


def tratador_de_excecoes(exc, context):
    """
    EXCEPTION_HANDLER do DRF: coloca no envelope todos os erros do framework
    (validação, autenticação, permissão, 404) e transforma o resto em 500.
    """
    if isinstance(exc, BaseErroCore):
        return resposta_falha(Falha(exc))

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception("Erro inesperado em %s", view.__class__.__name__ if view else 'view desconhecida')
        return resposta_erro(
            'Erro interno do servidor.',
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            error=str(exc) if settings.DEBUG else None,
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = envelope(
            data=response.data, message='Dados inválidos.', code=response.status_code
        )
        return response

    detalhe = response.data.get('detail', response.data) if isinstance(response.data, dict) else response.data
    response.data = envelope(message=str(detalhe), code=response.status_code)
    return response
