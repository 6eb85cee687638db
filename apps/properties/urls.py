from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'properties'

# SimpleRouter: an API root view would shadow the list route at the empty prefix
router = SimpleRouter()
router.register(r'', views.RuralPropertyViewSet, basename='property')

urlpatterns = [
    # GET    /api/properties/                  - List (filters + pagination)
    # POST   /api/properties/                  - Create
    # GET    /api/properties/{id}/             - Retrieve
    # PUT    /api/properties/{id}/             - Update
    # PATCH  /api/properties/{id}/             - Partial update
    # DELETE /api/properties/{id}/             - Delete
    # POST   /api/properties/{id}/mark-paid/   - Mark as paid
    # POST   /api/properties/check-duplicate/  - Duplicate lookup
    # GET    /api/properties/autocomplete/     - Lookup by first letter
    # POST   /api/properties/refresh-overdue/  - Flag overdue records
    # POST   /api/properties/sync/             - Replay offline queue
    path('', include(router.urls)),
]
