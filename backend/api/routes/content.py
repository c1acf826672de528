import logging
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response
from config import get_settings
from services.llm_service import LLMService, get_llm_service
from services.validation import (
    InputValidationError,
    check_content_injection,
    detect_prompt_injection,
    validate_content,
    validate_source_text,
    validate_speech_text,
    CONTENT_PATTERNS,
    MAX_TEXT_LENGTH,
)
from services.document_parser import DocumentParser
from services.pdf_exporter import export_filename, export_pdf
from services.speech_service import SpeechProviderError, SpeechService
from agents.simplification_agent import SimplificationAgent
from agents.translation_agent import TranslationAgent
from agents.key_terms_agent import KeyTermsAgent
from models.content import KeyTerm
from models.language import TRANSLATION_LANGUAGES
from models.requests import (
    ExplainTermsRequest,
    ExportRequest,
    SimplifyRequest,
    SpeechRequest,
    TranslateRequest,
)

logger = logging.getLogger("api.content")
router = APIRouter(prefix="/api", tags=["content"])


@router.post("/simplify")
async def simplify(body: SimplifyRequest, llm: LLMService = Depends(get_llm_service)):
    """Summarize text into {summary, bulletPoints, eli5}."""
    text = validate_source_text(body.text)

    result = await SimplificationAgent(llm).execute(text)
    if not result.succeeded:
        logger.error(f"Error in simplify API: {result.error}")
        raise HTTPException(status_code=500, detail="Failed to simplify text")

    return {"simplified": result.output}


@router.post("/translate")
async def translate(body: TranslateRequest, llm: LLMService = Depends(get_llm_service)):
    """Translate simplified content into one of the supported languages."""
    if body.content is None or not body.target_language or not isinstance(body.target_language, str):
        raise InputValidationError("Content and target language are required")

    content = validate_content(body.content)

    if body.target_language not in TRANSLATION_LANGUAGES:
        raise InputValidationError("Unsupported language")

    check_content_injection(content)

    result = await TranslationAgent(llm).execute({
        "content": content,
        "target_language": body.target_language,
    })
    if not result.succeeded:
        logger.error(f"Error in translate API: {result.error}")
        raise HTTPException(status_code=500, detail="Failed to translate content")

    return {"translated": result.output}


@router.post("/explain-terms")
async def explain_terms(body: ExplainTermsRequest, llm: LLMService = Depends(get_llm_service)):
    """Extract 3-10 key terms with one-sentence definitions in the requested language."""
    if not body.content:
        raise InputValidationError("No content provided")

    content = validate_content(body.content)
    check_content_injection(content)

    original_text = body.original_text if isinstance(body.original_text, str) else ""
    if len(original_text) > MAX_TEXT_LENGTH:
        raise InputValidationError(f"Text exceeds maximum length of {MAX_TEXT_LENGTH} characters")
    if detect_prompt_injection(original_text, CONTENT_PATTERNS):
        raise InputValidationError("Invalid input detected")

    result = await KeyTermsAgent(llm).execute({
        "content": content,
        "original_text": original_text,
        "language": body.language,
    })
    if not result.succeeded:
        logger.error(f"Error in explain-terms API: {result.error}")
        raise HTTPException(status_code=500, detail="Failed to explain key terms")

    return {"terms": result.output["terms"]}


@router.post("/tts")
async def text_to_speech(body: SpeechRequest, llm: LLMService = Depends(get_llm_service)):
    """Read text aloud. Returns MP3 audio."""
    text = validate_speech_text(body.text, body.language)

    try:
        audio = await SpeechService(llm).synthesize(text, body.language)
    except SpeechProviderError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    except Exception as e:
        logger.error(f"Error generating speech: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate speech")

    return Response(
        content=audio,
        media_type="audio/mpeg",
        headers={"Content-Length": str(len(audio))},
    )


@router.post("/parse-file")
async def parse_file(file: UploadFile | None = File(None)):
    """Extract text from an uploaded PDF or DOCX file."""
    if file is None:
        raise InputValidationError("No file provided")

    settings = get_settings()
    data = await file.read()
    DocumentParser.check_upload(file.filename, file.content_type, len(data), settings.MAX_FILE_SIZE_MB)

    try:
        text = DocumentParser.parse(data, file.content_type)
    except InputValidationError:
        raise
    except Exception as e:
        logger.error(f"Error parsing file {file.filename}: {e}")
        raise HTTPException(status_code=500, detail="Failed to parse file")

    return {"text": text}


@router.post("/export-pdf")
async def export(body: ExportRequest):
    """Render the displayed content (and key terms) as a downloadable PDF."""
    content = validate_content(body.content)
    try:
        key_terms = [KeyTerm(**t) for t in body.key_terms] if body.key_terms else None
    except (TypeError, ValueError) as e:
        raise InputValidationError("Invalid key terms format") from e

    try:
        pdf = export_pdf(content, key_terms)
    except Exception as e:
        logger.error(f"Error exporting PDF: {e}")
        raise HTTPException(status_code=500, detail="Failed to export PDF")

    filename = export_filename(body.language)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
