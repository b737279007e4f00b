from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from . import views

urlpatterns = [
                  path('admin/', admin.site.urls),

                  path('api/health/', views.health, name='health'),

                  # Public catalog and checkout
                  path('api/public/', include('catalog.urls')),
                  path('api/public/', include('booking.urls')),

                  # Staff dashboard API
                  path('manager/api/', include('manager.urls')),
              ] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
