from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET


@require_GET
def health(request):
    return JsonResponse({
        'success': True,
        'message': 'Cricket nets booking API is running',
        'timestamp': timezone.now().isoformat(),
    })
