#!/usr/bin/env python
"""
Скрипт для настройки .env файла
Использование: python setup_env.py
"""
from pathlib import Path

from django.core.management.utils import get_random_secret_key

BASE_DIR = Path(__file__).resolve().parent
ENV_FILE = BASE_DIR / '.env'
ENV_EXAMPLE = BASE_DIR / '.env.example'


def render_env(content, secret_key):
    """Подставляет новый SECRET_KEY вместо небезопасного из .env.example"""
    lines = content.split('\n')
    for i, line in enumerate(lines):
        if line.startswith('SECRET_KEY=') and 'django-insecure' in line:
            lines[i] = f'SECRET_KEY={secret_key}'
            break
    return '\n'.join(lines)


def create_env_file():
    """Создает .env файл из .env.example с новым SECRET_KEY"""
    if ENV_FILE.exists():
        print(f"Файл {ENV_FILE} уже существует")
        response = input("Перезаписать? (y/n): ")
        if response.lower() != 'y':
            print("Отменено.")
            return

    if not ENV_EXAMPLE.exists():
        print(f"Файл {ENV_EXAMPLE} не найден")
        return

    content = ENV_EXAMPLE.read_text(encoding='utf-8')
    secret_key = get_random_secret_key()
    ENV_FILE.write_text(render_env(content, secret_key), encoding='utf-8')

    print(f"Файл {ENV_FILE} создан, SECRET_KEY сгенерирован")
    print("Для продакшена установите DEBUG=False и укажите ALLOWED_HOSTS и BUSINESS_EMAIL")


if __name__ == '__main__':
    create_env_file()
