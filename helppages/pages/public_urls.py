from django.urls import path

from . import public_views

urlpatterns = [
    path('', public_views.home, name='public-home'),
    path('u/<str:username>/', public_views.user_docs, name='public-user-docs'),
    path('u/<str:username>/<str:slug>/', public_views.user_page, name='public-user-page'),
    path('docs/<str:doc_slug>/', public_views.doc_index, name='public-doc'),
    path('docs/<str:doc_slug>/<str:page_slug>/', public_views.doc_page, name='public-doc-page'),
]
