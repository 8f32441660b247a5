"""
URL configuration for listings API.

URL Structure:
    /categories/                 GET, POST
    /categories/{id}/            GET, PUT, PATCH, DELETE
    /subcategories/              GET, POST (?category=)
    /subcategories/{id}/         GET, PUT, PATCH, DELETE
    /items/                      GET, POST
    /items/{id}/                 GET, PUT, PATCH, DELETE
    /items/{id}/interest/        POST
    /items/{id}/approval/        PUT, POST

All URLs are prefixed with /api/v1/listings/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from listings.views import CategoryViewSet, ItemViewSet, SubcategoryViewSet

router = DefaultRouter()
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"subcategories", SubcategoryViewSet, basename="subcategory")
router.register(r"items", ItemViewSet, basename="item")

app_name = "listings"

urlpatterns = [
    path("", include(router.urls)),
]
