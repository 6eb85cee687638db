from django.urls import path, include
from rest_framework.routers import SimpleRouter
from .views import CompanyViewSet, CompanyBoletoViewSet

app_name = 'companies'

router = SimpleRouter()
router.register(r'boletos', CompanyBoletoViewSet, basename='boleto')
router.register(r'', CompanyViewSet, basename='company')

# Routes:
# GET/POST          /api/companies/
# GET/PUT/PATCH/DEL /api/companies/{id}/
# GET/POST          /api/companies/{id}/fees/
# POST              /api/companies/{id}/fees/{year}/{month}/mark-paid/
# GET/POST          /api/companies/{id}/boletos/
# GET/PUT/DELETE    /api/companies/{id}/schedule/
# GET/PATCH         /api/companies/boletos/{id}/
# POST              /api/companies/boletos/{id}/mark-paid/
# POST              /api/companies/boletos/{id}/mark-sent/
# POST              /api/companies/boletos/{id}/cancel/

urlpatterns = [
    path('', include(router.urls)),
]
