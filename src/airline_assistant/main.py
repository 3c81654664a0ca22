"""
Main application entry point
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import config
from .container import ServiceContainer
from .error_handlers import (
    ErrorCode, ErrorHandler, ExceptionMapper, error_response,
    global_exception_handler, validation_exception_handler
)
from .services import KnowledgePreloader, build_metrics
from .types import ChatRequest, ChatResponse, EvaluationRequest, EvaluationResponse
from .utils.logger import setup_logging


logger = structlog.get_logger()


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """Build the FastAPI application around a service container"""
    setup_logging()
    service_container = container or ServiceContainer()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management"""
        logger.info("Starting Airline Assistant API", version=__version__, port=config.server.port)

        # A missing completion key aborts startup here
        await service_container.initialize()

        yield

        logger.info("Shutting down Airline Assistant API")
        await service_container.cleanup()

    app = FastAPI(
        title="Airline Assistant API",
        description="Airline customer chat grounded on live flight offers and the airline's policy pages",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if config.server.debug else None,
        redoc_url="/redoc" if config.server.debug else None,
    )
    app.state.container = service_container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    async def chat(request: ChatRequest):
        """
        Answer the last message of a conversation

        The message history is forwarded to the completion call after the
        system prompt built from whatever was retrieved for the last message.
        """
        if not request.messages:
            return JSONResponse(
                status_code=400,
                content=ErrorHandler.create_error_response(
                    ErrorHandler.get_user_friendly_message(ErrorCode.MESSAGES_REQUIRED)
                ),
            )

        try:
            outcome = await service_container.get_orchestrator().answer(request.messages)
        except Exception as e:
            logger.error("Error getting response from completion API", error=str(e), exc_info=e)
            return error_response(e)

        return ChatResponse(response=outcome.response)

    app.add_api_route("/chat", chat, methods=["POST"], response_model=ChatResponse)
    app.add_api_route("/api/chat", chat, methods=["POST"], response_model=ChatResponse)

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint"""
        health_status = {
            "status": "ok",
            "timestamp": datetime.now().isoformat(),
            "version": __version__,
            "components": {},
        }

        if service_container.is_initialized():
            flight_client = service_container.get_flight_client()
            health_status["components"]["flight_search"] = {
                "status": "configured" if flight_client.is_configured else "disabled",
            }

            knowledge = service_container.get_knowledge()
            state = knowledge.state if isinstance(knowledge, KnowledgePreloader) else "not_loaded"
            health_status["components"]["knowledge_base"] = {"status": state}

        return health_status

    @app.get("/api/test-key")
    async def test_key():
        """Check that the completion API key is accepted"""
        try:
            reply = await service_container.get_completion_client().verify_key()
        except Exception as e:
            logger.error("API key test failed", error=str(e))
            status_code, message = ExceptionMapper.to_key_check_response(e)
            return JSONResponse(status_code=status_code, content={"success": False, "error": message})

        return {"success": True, "message": "API key is valid and working!", "testResponse": reply}

    @app.get("/api/scrape")
    async def scrape():
        """Return the knowledge base as the scraper currently sees it"""
        try:
            data = await service_container.get_scraper().get_knowledge_base()
        except Exception as e:
            logger.error("Scraping error", error=str(e))
            return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

        return {"success": True, "data": data.model_dump(mode="json")}

    @app.post("/api/evaluate")
    async def evaluate(request: EvaluationRequest):
        """Answer one question and report latency and answer quality metrics"""
        if not request.question:
            return JSONResponse(
                status_code=400,
                content=ErrorHandler.create_error_response(
                    ErrorHandler.get_user_friendly_message(ErrorCode.QUESTION_REQUIRED)
                ),
            )

        try:
            outcome = await service_container.get_orchestrator().ask(request.question)
        except Exception as e:
            logger.error("Evaluation error", error=str(e))
            return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

        metrics = build_metrics(
            question=request.question,
            response=outcome.response,
            classification=outcome.classification,
            latency_ms=outcome.latency_ms,
            has_flight_data=outcome.has_flight_data,
            has_scraped_data=outcome.has_scraped_data,
            ground_truth=request.ground_truth,
            expected_keywords=request.expected_keywords,
        )

        result = EvaluationResponse(
            success=True,
            question=request.question,
            query_type=outcome.classification.kind,
            response=outcome.response,
            metrics=metrics,
        )
        return result.model_dump(mode="json", by_alias=True)

    return app


app = create_app()


def main():
    """Main entry point"""
    uvicorn.run(
        "airline_assistant.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.is_development,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
