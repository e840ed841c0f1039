from django.apps import AppConfig


class InfrastructureConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'zenmall.infrastructure'
    label = 'infrastructure' # Dono do AUTH_USER_MODEL
    verbose_name = 'Infraestrutura (Usuários e Repositórios)'
