"""AI service using Langchain and Google Gemini for image relevance checks"""

import base64
from typing import Optional

from langchain_core.prompts import ChatPromptTemplate
from langchain_core.output_parsers import PydanticOutputParser
from langchain_google_genai import ChatGoogleGenerativeAI

from nagrik.core.config import settings
from nagrik.models.complaint import IssueType
from nagrik.schemas.ai_outputs import ImageRelevanceOutput

ISSUE_TYPE_LABELS = {
    IssueType.STREETLIGHT: "Street Light Issues",
    IssueType.POTHOLE: "Pothole/Road Damage",
    IssueType.GARBAGE: "Garbage Collection",
    IssueType.DRAINAGE: "Drainage Problems",
    IssueType.WATER: "Water Supply Issues",
    IssueType.ELECTRICITY: "Power Outage",
    IssueType.NOISE: "Noise Pollution",
    IssueType.OTHERS: "Other Issues",
}


class GeminiAIService:
    """Checks whether a complaint photo shows the declared issue, using Gemini vision"""

    def __init__(self):
        """Initialize Gemini AI service with Langchain"""
        self.api_key = settings.GOOGLE_API_KEY
        if not self.api_key:
            raise ValueError("GOOGLE_API_KEY environment variable not set")

        # One attempt per upload; the caller owns any retry
        self.model = ChatGoogleGenerativeAI(
            model=settings.GEMINI_MODEL,
            google_api_key=self.api_key,
            temperature=0.2,
            max_retries=0,
            timeout=settings.CLASSIFICATION_TIMEOUT_SECONDS,
        )

    @staticmethod
    def _encode_image(image_bytes: bytes, content_type: str) -> str:
        """Encode raw image bytes as a data URL"""
        encoded = base64.b64encode(image_bytes).decode("utf-8")
        return f"data:{content_type};base64,{encoded}"

    async def check_image_relevance(
        self,
        image_bytes: bytes,
        issue_type: IssueType,
        content_type: str = "image/jpeg",
    ) -> ImageRelevanceOutput:
        """
        Decide whether an image is evidence of the declared civic issue.

        Args:
            image_bytes: Raw image content
            issue_type: Issue category the citizen selected
            content_type: MIME type of the image

        Returns:
            ImageRelevanceOutput: verdict plus a description or a rejection reason
        """
        parser = PydanticOutputParser(pydantic_object=ImageRelevanceOutput)

        prompt_template = ChatPromptTemplate.from_messages([
            (
                "system",
                """You review photos attached to civic complaints filed by citizens in Indian cities.
                Decide whether the photo clearly shows the issue category the citizen selected.

                If it does, write a short, factual description of the problem visible in the photo
                that the citizen can submit as their complaint text. Do not invent details that are
                not visible. If it does not, explain briefly what the photo shows instead.

                {format_instructions}"""
            ),
            (
                "human",
                [
                    {
                        "type": "text",
                        "text": """Selected issue category: {issue_label} ({issue_type})

                        Is this photo relevant to the selected category?"""
                    },
                    {
                        "type": "image_url",
                        "image_url": {"url": "{image_url}"}
                    }
                ]
            )
        ])

        formatted_prompt = prompt_template.format_messages(
            format_instructions=parser.get_format_instructions(),
            issue_label=ISSUE_TYPE_LABELS.get(issue_type, issue_type.value),
            issue_type=issue_type.value,
            image_url=self._encode_image(image_bytes, content_type),
        )

        response = await self.model.ainvoke(formatted_prompt)

        return parser.parse(response.content)


# Singleton instance
_ai_service_instance: Optional[GeminiAIService] = None


def get_ai_service() -> GeminiAIService:
    """Get or create AI service singleton instance"""
    global _ai_service_instance
    if _ai_service_instance is None:
        _ai_service_instance = GeminiAIService()
    return _ai_service_instance
