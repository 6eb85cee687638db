from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    path('statistics/', views.property_statistics, name='statistics'),
    path('charts/', views.chart_data, name='charts'),
    path('alerts/', views.payment_alerts, name='alerts'),
    path('companies-overview/', views.companies_overview, name='companies-overview'),
    path('dashboard/', views.dashboard, name='dashboard'),
]
