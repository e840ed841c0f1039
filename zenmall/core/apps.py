# zenmall/core/apps.py

from django.apps import AppConfig

class CoreConfig(AppConfig):
    # O nome completo do path da aplicação
    name = 'zenmall.core'
    label = 'core'
    verbose_name = 'Camada de Entidades e Lógica (Core)'

    # Esta camada não possui models: entidades puras, portas e casos de uso.
    default_auto_field = 'django.db.models.BigAutoField'
