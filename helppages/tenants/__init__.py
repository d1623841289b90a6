"""
Tenants app — субдомены пользователей.

Каждый пользователь получает свой субдомен: anna.helppages.ai → User(username='anna').
Своих моделей у приложения нет, только middleware, разбор хоста и contextvars.
"""
