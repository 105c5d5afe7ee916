"""
Biographer Prompt Library

Centralized prompt templates for every model call in the pipelines.
"""

from typing import List


class PromptLibrary:
    """
    Prompt templates for:
    - Transcript normalization and conversation filtering
    - Scene segmentation and story-moment polishing
    - Clarifying questions and answer matching
    - Panel image prompts
    """

    # ==========================================================================
    # TRANSCRIPTS
    # ==========================================================================

    TRANSCRIPT_EXTRACTOR = (
        "You are a story extractor. The user will provide a conversation transcript "
        "between a user and AI. Extract ONLY the actual story content that the user is "
        "telling (ignore AI's questions and prompts). Rewrite it as a coherent narrative "
        "in third person, keeping all the important details, characters, settings, and "
        "plot points the user described. Be detailed and vivid."
    )

    CONVERSATION_FILTER = (
        "Extract the story elements from this conversation. Focus on: characters "
        "(names, descriptions), setting (where, when), plot (what happens), and key "
        "details. Ignore filler words, off-topic discussion, and technical issues. "
        "Output a clear, detailed story prompt suitable for generating a cartoon."
    )

    # ==========================================================================
    # SCENES
    # ==========================================================================

    SCENE_SEGMENTER = (
        "You are a creative story analyzer. {task} Each scene should describe WHAT "
        "HAPPENS in that moment of the story, not just how it looks, so the panels "
        "read like connected chapters with the same main character throughout. Keep "
        "each scene to one or two sentences. Return ONLY a JSON array of exactly {count} "
        "scene strings, nothing else. Format: [\"scene 1\", \"scene 2\", ...]"
    )

    STORY_MOMENT_POLISHER = (
        "You turn cartoon panel scenes into short story moments. Rewrite each scene as "
        "ONE short sentence that says what happens, in a warm, consistent tone. Chain the "
        "moments so they read as one story (for example: \"First...\", \"Then...\", "
        "\"Finally...\"). Keep names, places and key details. Return ONLY a JSON array "
        "of exactly {count} strings, in the same order as the input."
    )

    # ==========================================================================
    # QUESTIONS & ANSWERS
    # ==========================================================================

    QUESTION_GENERATOR = (
        "You are a creative story analyst. Your job is to identify gaps in the story "
        "that, if filled, would make it more vivid and complete for cartoon generation. "
        "Generate 2-5 specific questions that would help add visual details, emotional "
        "depth, or clarify ambiguous parts. Return ONLY a JSON array of question strings."
    )

    ANSWER_MATCHER = (
        "You are an AI that analyzes transcribed speech and matches relevant information "
        "to specific questions. Your job is to extract the most relevant parts of the "
        "transcription that answer each question. Return ONLY a JSON object with question "
        "indices as keys and extracted answers as values. If a question isn't answered in "
        "the transcription, use an empty string."
    )

    # ==========================================================================
    # IMAGES
    # ==========================================================================

    PANEL_IMAGE = (
        "Create a {style} depicting this moment: {moment}. IMPORTANT: Keep the same "
        "character throughout all panels - maintain consistent appearance, age, and "
        "features. Cinematic composition, expressive characters, no text or speech bubbles."
    )

    # ==========================================================================
    # BUILDERS
    # ==========================================================================

    @classmethod
    def scene_segmenter(cls, count: int) -> str:
        if count == 1:
            task = (
                "Create ONE key scene that captures the essence of the story as a "
                "cartoon panel. Focus on the most impactful moment."
            )
        else:
            task = f"Split the story into {count} key scenes that would make great cartoon panels."
        return cls.SCENE_SEGMENTER.format(task=task, count=count)

    @staticmethod
    def scene_request(story: str, count: int) -> str:
        label = "1 cartoon scene" if count == 1 else f"{count} cartoon scenes"
        return f"Create {label} based on this story:\n\n{story}"

    @classmethod
    def story_moment_polisher(cls, count: int) -> str:
        return cls.STORY_MOMENT_POLISHER.format(count=count)

    @staticmethod
    def polish_request(scenes: List[str]) -> str:
        numbered = "\n".join(f"{i + 1}. {scene}" for i, scene in enumerate(scenes))
        return f"Rewrite these {len(scenes)} scenes as story moments:\n\n{numbered}"

    @staticmethod
    def question_request(context: str) -> str:
        return f"Analyze this story and generate questions to improve it:\n\n{context}"

    @staticmethod
    def answer_request(transcription: str, questions: List[str]) -> str:
        listed = "\n".join(f"{i}. {question}" for i, question in enumerate(questions))
        return (
            f"Here is a transcription of someone speaking:\n\n{transcription}\n\n"
            f"Here are the questions to answer:\n{listed}\n\n"
            "Return a JSON object mapping question indices to their answers based on the transcription."
        )

    @classmethod
    def panel_image(cls, moment: str, style_description: str) -> str:
        return cls.PANEL_IMAGE.format(style=style_description, moment=moment)
