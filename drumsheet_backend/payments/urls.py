# payments/urls.py

from django.urls import path

from payments.views import (
    DodoCreatePaymentView,
    DodoCreateSessionView,
    KakaoPayPrepareView,
    PayPalCaptureOrderView,
    PayPalCreateOrderView,
    PortOneVerifyView,
)
from wallet.views import PointsPayView

urlpatterns = [
    path("portone/verify/", PortOneVerifyView.as_view(), name="portone-verify"),
    path("kakaopay/prepare/", KakaoPayPrepareView.as_view(), name="kakaopay-prepare"),
    path("paypal/create-order/", PayPalCreateOrderView.as_view(), name="paypal-create-order"),
    path("paypal/capture-order/", PayPalCaptureOrderView.as_view(), name="paypal-capture-order"),
    path("dodo/create/", DodoCreatePaymentView.as_view(), name="dodo-create"),
    path("dodo/create-session/", DodoCreateSessionView.as_view(), name="dodo-create-session"),
    path("points/pay/", PointsPayView.as_view(), name="points-pay"),
]
