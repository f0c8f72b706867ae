"""
Gated routes. Everything on this router passes through the access gate first;
HR record endpoints are mounted here by including further routers.
"""
from fastapi import APIRouter, Depends

from ..gate import access_gate
from ..schemas import ProtectedResponse, TokenClaims

router = APIRouter(prefix="/api", tags=["protected"], dependencies=[Depends(access_gate)])


@router.get("/protected", response_model=ProtectedResponse)
def protected(user: TokenClaims = Depends(access_gate)):
    return ProtectedResponse(message="This is protected data", user=user)
