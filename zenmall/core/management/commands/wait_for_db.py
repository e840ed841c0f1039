"""
Management command para aguardar o banco de dados estar disponível.
"""
import time

from django.core.management.base import BaseCommand, CommandError
from django.db import connections
from django.db.utils import OperationalError


class Command(BaseCommand):
    """Django command para pausar a execução até o banco de dados estar disponível."""
    help = 'Aguarda até que o banco de dados aceite conexões.'

    def add_arguments(self, parser):
        parser.add_argument('--database', default='default')
        parser.add_argument('--tentativas', type=int, default=30,
                            help='Número máximo de tentativas (0 = sem limite).')
        parser.add_argument('--intervalo', type=float, default=1.0,
                            help='Segundos entre as tentativas.')

    def handle(self, *args, **options):
        self.stdout.write('Aguardando pelo banco de dados...')
        conexao = connections[options['database']]
        tentativa = 0

        while True:
            tentativa += 1
            try:
                conexao.ensure_connection()
                break
            except OperationalError:
                if options['tentativas'] and tentativa >= options['tentativas']:
                    raise CommandError(f'Banco de dados indisponível após {tentativa} tentativas.')
                self.stdout.write(f"Banco de dados indisponível, aguardando {options['intervalo']} segundo(s)...")
                time.sleep(options['intervalo'])

        self.stdout.write(self.style.SUCCESS('Banco de dados disponível!'))
