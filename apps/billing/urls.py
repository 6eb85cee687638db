from django.urls import path
from . import views

app_name = 'billing'

urlpatterns = [
    path('companies/<uuid:company_id>/issue/', views.issue_boleto, name='issue-boleto'),
    path('boletos/<uuid:boleto_id>/pdf/', views.boleto_pdf, name='boleto-pdf'),
    path('boletos/<uuid:boleto_id>/cancel/', views.cancel_boleto, name='boleto-cancel'),
    path('boletos/<uuid:boleto_id>/refresh/', views.refresh_boleto, name='boleto-refresh'),
    path('boletos/<uuid:boleto_id>/qr/', views.boleto_qr, name='boleto-qr'),
    path('webhook/', views.cora_webhook, name='cora-webhook'),
]
