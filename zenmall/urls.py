# zenmall/urls.py
"""
Configuração principal de URL do projeto Zen Mall.

Este arquivo centraliza o roteamento, incluindo:
1. Rotas do Admin (Django Admin)
2. Rotas da API (zenmall.presentation)
3. Rotas da Documentação da API (Swagger/Redoc)
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView


urlpatterns = [
    # URL para o painel de administração padrão do Django
    path('admin/', admin.site.urls),

    # ====================================================================
    # ROTAS DE DOCUMENTAÇÃO DA API (DRF SPECTACULAR)
    # ====================================================================
    # 1. Rota para o arquivo Schema YAML (gerado automaticamente)
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),

    # 2. Rota para a interface de usuário do Swagger (visualização interativa)
    path('api/docs/swagger/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    # 3. Rota para a interface Redoc
    path('api/docs/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),

    # API da loja (produtos, carrinho e pedidos)
    path('', include('zenmall.presentation.urls')),
]
