# Configuração da interface administrativa do Django para os modelos do Zen Mall.

from django import forms
from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.http import HttpResponseRedirect

from zenmall.carrinho.models import Carrinho, ItemCarrinho
from zenmall.catalog.models import Categoria, Produto
from zenmall.core import dependency_injection as di
from zenmall.core.status import StatusPedido, pode_transitar
from zenmall.infrastructure.models import Usuario
from zenmall.pedidos.models import ItemPedido, Pedido

# ====================================================================
# 1. ADMIN PERSONALIZADO PARA USUÁRIOS (login por e-mail)
# ====================================================================

@admin.register(Usuario)
class UsuarioAdmin(BaseUserAdmin):
    """Customização do modelo Usuario: sem username, e-mail como identificador."""

    list_display = ('email', 'first_name', 'last_name', 'is_staff', 'is_active', 'telefone')
    list_filter = ('is_staff', 'is_active')

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Informações de Perfil', {'fields': ('first_name', 'last_name', 'telefone')}),
        ('Permissões', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Datas', {'fields': ('last_login', 'date_joined')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'password1', 'password2', 'is_staff'),
        }),
    )

    # O campo 'username' não existe no modelo Usuario
    search_fields = ('email', 'first_name', 'last_name')
    ordering = ('email',)


# ====================================================================
# 2. ADMIN PARA CATÁLOGO
# ====================================================================

@admin.register(Categoria)
class CategoriaAdmin(admin.ModelAdmin):
    list_display = ('nome', 'parent')
    search_fields = ('nome',)


@admin.register(Produto)
class ProdutoAdmin(admin.ModelAdmin):
    list_display = ('nome', 'preco', 'estoque', 'categoria', 'status', 'criado_em')
    list_filter = ('status', 'categoria')
    search_fields = ('nome', 'descricao', 'id')
    ordering = ('nome',)
    fieldsets = (
        ('Informações Básicas', {
            'fields': ('nome', 'descricao', 'preco', 'estoque', 'status')
        }),
        ('Classificação', {
            'fields': ('categoria',),
        }),
    )


# ====================================================================
# 3. ADMIN PARA CARRINHOS (somente leitura)
# ====================================================================

class ItemCarrinhoInline(admin.TabularInline):
    model = ItemCarrinho
    readonly_fields = ('produto', 'quantidade', 'criado_em')
    extra = 0
    can_delete = False


@admin.register(Carrinho)
class CarrinhoAdmin(admin.ModelAdmin):
    list_display = ('id', 'usuario', 'preco_total', 'atualizado_em')
    search_fields = ('usuario__email',)
    readonly_fields = ('usuario', 'preco_total', 'criado_em', 'atualizado_em')
    inlines = [ItemCarrinhoInline]

    def has_add_permission(self, request):
        return False


# ====================================================================
# 4. ADMIN PARA PEDIDOS
# ====================================================================

class ItemPedidoInline(admin.TabularInline):
    """Exibe os itens comprados (snapshot) dentro do detalhe do Pedido."""
    model = ItemPedido
    readonly_fields = ('produto', 'quantidade', 'preco', 'subtotal')
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class PedidoAdminForm(forms.ModelForm):
    """Recusa no próprio formulário as mudanças de status fora da tabela de transições."""

    class Meta:
        model = Pedido
        fields = ('status', 'observacao')

    def clean_status(self):
        novo = self.cleaned_data['status']
        atual = self.instance.status
        if self.instance.pk and novo != atual and not pode_transitar(StatusPedido(atual), StatusPedido(novo)):
            raise forms.ValidationError(f"Transição de status ilegal: '{atual}' -> '{novo}'.")
        return novo


@admin.register(Pedido)
class PedidoAdmin(admin.ModelAdmin):
    form = PedidoAdminForm
    list_display = ('numero_pedido', 'usuario', 'criado_em', 'preco_total', 'status')
    list_filter = ('status', 'criado_em')
    search_fields = ('numero_pedido', 'usuario__email')
    date_hierarchy = 'criado_em'
    inlines = [ItemPedidoInline]
    readonly_fields = ('numero_pedido', 'usuario', 'preco_total', 'endereco_entrega', 'criado_em', 'atualizado_em')

    def save_model(self, request, obj, form, change):
        """
        Mudanças de status passam pelo mesmo caso de uso da API (tabela de
        transições e devolução de estoque); a observação é gravada junto.
        """
        if not change or 'status' not in form.changed_data:
            super().save_model(request, obj, form, change)
            return

        resultado = di.get_gerenciar_pedidos_admin_use_case().atualizar(
            di.get_unidade_de_trabalho(), obj.pk, status=obj.status, observacao=obj.observacao
        )
        if not resultado.ok:
            # Ex: outra operação mudou o status entre o carregamento do formulário e o envio
            request.status_pedido_recusado = True
            self.message_user(request, resultado.mensagem, level=messages.ERROR)

    def response_change(self, request, obj):
        """Sem a mensagem de "alterado com sucesso" quando o caso de uso recusou a mudança."""
        if getattr(request, 'status_pedido_recusado', False):
            return HttpResponseRedirect(request.path)
        return super().response_change(request, obj)

    def has_add_permission(self, request):
        """Impedir a criação de pedidos pela interface do Admin (apenas por checkout)."""
        return False
