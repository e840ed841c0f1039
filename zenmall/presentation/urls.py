from django.urls import path

from . import views, views_admin

urlpatterns = [
    # Catálogo
    path('products/', views.ProdutoListAPIView.as_view(), name='produto-list'),
    path('products/<int:pk>/', views.ProdutoDetailAPIView.as_view(), name='produto-detail'),

    # Carrinho
    path('cart/', views.CarrinhoAPIView.as_view(), name='carrinho'),
    path('cart/<int:item_id>/', views.ItemCarrinhoAPIView.as_view(), name='carrinho-item'),

    # Painel administrativo (antes das rotas com <int:pk>)
    path('orders/admin/', views_admin.PedidoAdminListAPIView.as_view(), name='pedido-admin-list'),
    path('orders/admin/filter/', views_admin.PedidoAdminFiltroAPIView.as_view(), name='pedido-admin-filter'),
    path('orders/admin/statistics/', views_admin.PedidoAdminEstatisticasAPIView.as_view(), name='pedido-admin-statistics'),
    path('orders/admin/<int:pk>/', views_admin.PedidoAdminDetailAPIView.as_view(), name='pedido-admin-detail'),
    path('orders/admin/<int:pk>/refund/', views_admin.PedidoAdminReembolsoAPIView.as_view(), name='pedido-admin-refund'),

    # Pedidos do cliente
    path('orders/', views.PedidoListCreateAPIView.as_view(), name='pedido-list'),
    path('orders/<int:pk>/', views.PedidoDetailAPIView.as_view(), name='pedido-detail'),
    path('orders/<int:pk>/status/', views.PedidoStatusAPIView.as_view(), name='pedido-status'),
    path('orders/<int:pk>/cancel/', views.PedidoCancelarAPIView.as_view(), name='pedido-cancel'),
]
