"""URL routing for payment orders."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import CaptureOrderView, CreateOrderView

urlpatterns = [
    path("orders/", CreateOrderView.as_view(), name="payment-order-create"),
    path("orders/<str:order_id>/capture/", CaptureOrderView.as_view(), name="payment-order-capture"),
]
