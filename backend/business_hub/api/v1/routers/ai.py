from fastapi import APIRouter, Depends
from business_hub.api.v1.deps import get_current_user
from business_hub.models.user import User
from business_hub.schemas.ai import DocumentIn, EmailIn, StartupIdeaIn
from business_hub.schemas.invoice import FinancialAdviceIn
from business_hub.services import invoices
from business_hub.services.content_generator import content_generator
from business_hub.services.credits import Feature, require_credits
from business_hub.services.document_intelligence import document_intelligence, parse_data_uri

router = APIRouter(prefix="/ai", tags=["ai"])

# Each endpoint charges its feature before calling the generative backend.
# A generation failure after the charge is reported, not refunded.

@router.post("/email")
async def generate_email(body: EmailIn, user: User = Depends(get_current_user)):
    charge = await require_credits(user, Feature.EMAIL_GENERATOR)
    draft = await content_generator.generate_email(body.goal, body.tone)
    return {"success": True, "data": {**draft.model_dump(), "credits": charge.to_dict()}}

@router.post("/startup")
async def generate_startup(body: StartupIdeaIn, user: User = Depends(get_current_user)):
    """
    Startup generator: name, business plan and workflow from the model, plus a
    logo and a pitch deck URL derived from the generated name.
    """
    charge = await require_credits(user, Feature.STARTUP_GENERATOR)
    assets = await content_generator.startup_assets(body.idea)
    return {"success": True, "data": {**assets.model_dump(), "credits": charge.to_dict()}}

@router.post("/document")
async def analyze_document(body: DocumentIn, user: User = Depends(get_current_user)):
    """
    Document intelligence: summary and risk assessment of an uploaded file.
    The data URI is checked before any credits are spent.
    """
    parse_data_uri(body.documentDataUri)
    charge = await require_credits(user, Feature.DOCUMENT_INTELLIGENCE)
    analysis = await document_intelligence.analyze(body.documentDataUri, body.filename)
    return {"success": True, "data": {**analysis.model_dump(), "credits": charge.to_dict()}}

@router.post("/financial-advice")
async def financial_advice(body: FinancialAdviceIn, user: User = Depends(get_current_user)):
    """
    AI financial analyst over the caller's recorded transactions.

    Error codes:
        - VALIDATION_ERROR (422): no transactions recorded yet
        - INSUFFICIENT_CREDITS (402)
        - GENERATION_FAILED (502)
    """
    advice, charge = await invoices.financial_advice(user, body.question)
    return {"success": True, "data": {**advice.model_dump(), "credits": charge.to_dict()}}
