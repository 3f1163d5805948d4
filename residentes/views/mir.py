from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..context import optional_current_user
from ..serializers.mir import MirSimulatorSerializer
from ..services.mir import calculate_probabilities


@api_view(['POST'])
@permission_classes([AllowAny])
def mir_simulator(request):
    """Admission probability per hospital for a MIR rank and specialty.

    Open to anonymous visitors; searches by signed-in users are logged.
    """
    s = MirSimulatorSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    results = calculate_probabilities(
        optional_current_user(request), v['userRank'], v['specialtyId'], region=v.get('region') or None,
    )
    return Response({'ok': True, 'results': results})

# ScopedRateThrottle reads the scope from the wrapped view class
mir_simulator.cls.throttle_scope = 'mir_simulator'
