"""
Единая политика доступа к документациям и страницам.

Все проверки "владелец / admin / editor" живут здесь, views и
сервисы только вызывают эти функции (или DRF-классы из
documentation.permissions поверх них).

    collaborator = admin или editor (глобальная роль)

    управлять документацией   → владелец или collaborator
    удалить документацию      → владелец или admin
    редактировать страницу    → автор, владелец документации или collaborator
    удалить страницу          → владелец документации или admin
    видеть страницу           → опубликована в публичной документации — все,
                                иначе автор, владелец документации или collaborator
"""
from accounts import roles


def _is_authenticated(user):
    return user is not None and getattr(user, 'is_authenticated', False)


def is_collaborator(user):
    return roles.has_role(user, (roles.ADMIN, roles.EDITOR))


def is_doc_owner(user, doc):
    return _is_authenticated(user) and doc.user_id == user.pk


def can_manage_doc(user, doc):
    return is_doc_owner(user, doc) or is_collaborator(user)


def can_delete_doc(user, doc):
    return is_doc_owner(user, doc) or roles.has_role(user, roles.ADMIN)


def can_view_doc(user, doc):
    return doc.is_public or can_manage_doc(user, doc)


def can_edit_page(user, page):
    if not _is_authenticated(user):
        return False
    return page.user_id == user.pk or can_manage_doc(user, page.doc)


def can_delete_page(user, page):
    return can_delete_doc(user, page.doc)


def can_view_page(user, page):
    if page.is_published and page.doc.is_public:
        return True
    return can_edit_page(user, page)


def is_author_or_collaborator(user, page):
    if not _is_authenticated(user):
        return False
    return page.user_id == user.pk or is_collaborator(user)


def can_view_revisions(user, page):
    """История версий: автор страницы или collaborator."""
    return is_author_or_collaborator(user, page)
