from decimal import Decimal

from django.core.management.base import BaseCommand

from zenmall.catalog.models import Categoria, Produto


class Command(BaseCommand):
    help = 'Carrega categorias e produtos iniciais do catálogo'

    def handle(self, *args, **kwargs):
        self.stdout.write('Criando dados iniciais...')

        # Categorias
        categorias = [
            {'nome': 'Incensos', 'descricao': 'Incensos de sândalo, agarwood e ervas'},
            {'nome': 'Livros de Sutras', 'descricao': 'Sutras para recitação e cópia'},
            {'nome': 'Rosários', 'descricao': 'Rosários de madeira, sementes e pedras'},
            {'nome': 'Objetos de Culto', 'descricao': 'Incensários, sinos e lamparinas'},
        ]

        for cat_data in categorias:
            categoria, created = Categoria.objects.get_or_create(
                nome=cat_data['nome'],
                defaults={'descricao': cat_data['descricao']},
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'Criada categoria "{categoria.nome}"'))

        # Produtos por categoria
        produtos = {
            'Incensos': [
                ('Incenso de Sândalo (100 varetas)', 'Sândalo indiano, queima lenta', Decimal('39.90'), 50),
                ('Incenso em Espiral de Agarwood', 'Espiral de 4 horas', Decimal('89.00'), 20),
            ],
            'Livros de Sutras': [
                ('Sutra do Coração', 'Edição bilíngue para recitação', Decimal('25.00'), 30),
                ('Sutra do Diamante', 'Edição para cópia à mão', Decimal('48.00'), 15),
            ],
            'Rosários': [
                ('Rosário de Bodhi 108 contas', 'Sementes de bodhi polidas', Decimal('120.00'), 10),
                ('Rosário de Sândalo 21 contas', 'Pulseira de sândalo vermelho', Decimal('68.00'), 12),
            ],
            'Objetos de Culto': [
                ('Incensário de Cobre', 'Incensário com tampa vazada', Decimal('210.00'), 5),
                ('Sino de Meditação', 'Sino de latão com almofada', Decimal('150.00'), 8),
            ],
        }

        for cat_nome, prods in produtos.items():
            try:
                categoria = Categoria.objects.get(nome=cat_nome)
            except Categoria.DoesNotExist:
                self.stdout.write(self.style.ERROR(f'Categoria "{cat_nome}" não encontrada'))
                continue

            for nome, desc, preco, estoque in prods:
                produto, created = Produto.objects.get_or_create(
                    nome=nome,
                    defaults={
                        'descricao': desc,
                        'preco': preco,
                        'estoque': estoque,
                        'categoria': categoria,
                    }
                )
                if created:
                    self.stdout.write(self.style.SUCCESS(f'Criado produto "{produto.nome}"'))

        self.stdout.write(self.style.SUCCESS('Dados iniciais carregados com sucesso!'))
