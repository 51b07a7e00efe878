# src/content_gen/prompts.py
"""
Prompt templates for article generation, section regeneration and
evidence assessment.
"""
from typing import Dict, List

SYSTEM_PROMPT = """You are a mental health content expert. Generate well-researched, accurate, and empathetic content about mental health topics.
Always include all required fields in your response exactly as specified.
For summaries, always start with a direct definition of the topic, avoiding phrases like "This article explores..." or "We discuss...".
Focus on what the condition/topic IS, not what the article will cover.
For {category} articles, make sure to include all required fields: {required_fields}.
IMPORTANT:
1. The tags field must be an array of strings, not a single string. Example: ["mental health", "psychosis", "treatment"]
2. All other text fields must be strings, not arrays
3. Return a single JSON object and nothing else"""

SECTION_SYSTEM_PROMPT = (
    "You are an expert content writer specializing in mental health, psychology, and neuroscience. "
    "Your task is to write clear, engaging content that is both scientifically accurate and "
    "accessible to a general audience."
)

EVIDENCE_SYSTEM_PROMPT = (
    "You are a research analyst expert at evaluating evidence quality. Provide only JSON responses."
)

SUMMARY_RULES = """- Start with a clear, direct definition of the topic
- Focus on what the condition/topic IS, not what the article will cover
- Avoid phrases like "This article explores..." or "We discuss..."
- Keep it concise (2-3 sentences maximum)
- Use active voice and present tense
- Include key prevalence or impact information if relevant"""

RELIABILITY_GUIDANCE = """Calculate reliability_score (0-1) based on:
  - Effect sizes (0.1-0.3 = small, 0.3-0.5 = medium, >0.5 = large)
  - Number of studies/replications
  - Quality of evidence (RCTs, meta-analyses, etc.)
  - Consistency of findings across studies"""

CATEGORY_INSTRUCTIONS: Dict[str, str] = {
    'mental_health': """## Mental Health Articles
Focus on understanding, prevalence, causes, symptoms, and evidence-based approaches.
- Provide clear definitions and prevalence statistics
- Explain biological and environmental causes
- Describe symptoms and their impact on daily life
- Include evidence-based treatment approaches
- Address common myths
- Offer practical coping strategies""",

    'neuroscience': """## Neuroscience Articles
Focus on brain mechanisms, research findings, and scientific understanding.
- Explain brain mechanisms clearly
- Highlight key research studies
- Connect neuroscience to everyday life
- Address common misconceptions""",

    'psychology': """## Psychology Articles
Focus on psychological principles, theories, and applications.
- Explain psychological concepts clearly
- Include key theories and research
- Show practical applications
- Address misconceptions""",

    'brain_health': """## Brain Health Articles
Focus on maintaining and optimizing brain function.
- Explain brain health concepts
- Include evidence-based strategies
- Address common myths
- Focus on prevention and optimization""",

    'neurodiversity': """## Neurodiversity Articles
Focus on neurodivergent perspectives, strengths, and support.
- Emphasize neurodiversity as natural variation
- Highlight strengths and challenges
- Include lived experience perspectives
- Address misconceptions respectfully
- Focus on acceptance and accommodation""",

    'interventions': """## Intervention Articles
Focus on evidence-based interventions and their effectiveness.
- Explain how the intervention works
- Provide a comprehensive evidence summary
- Include practical application guidelines
- Address risks and limitations
- """ + RELIABILITY_GUIDANCE,

    'lifestyle_factors': """## Lifestyle Factors Articles
Focus on lifestyle choices that impact mental health and brain function.
- Explain the lifestyle factor's impact
- Provide evidence-based recommendations
- Include practical implementation tips
- Address common myths
- """ + RELIABILITY_GUIDANCE,

    'lab_testing': """## Lab Testing Articles
Focus on laboratory tests and their applications in mental health.
- Explain how the test works
- Describe applications and uses
- Address strengths, limitations and risks
- Provide practical guidance""",

    'risk_factors': """## Risk Factors Articles
Focus on factors that increase risk for mental health conditions and how to address them.
Content blocks, in this order: overview, prevalence, mechanisms, evidence_summary,
modifiable_factors, protective_factors, practical_takeaways, reliability_score.
- Provide accurate prevalence statistics
- Describe biological and psychological mechanisms
- Focus on modifiable factors that can be addressed
- Highlight protective factors and resilience
- """ + RELIABILITY_GUIDANCE,
}

FORMAT_RULES = """## Important Format Requirements
- Use snake_case for all field names (e.g., practical_applications, evidence_summary)
- ALL text fields must be returned as strings, NOT arrays
- evidence_summary is one cohesive paragraph covering key evidence and effectiveness
- practical_applications is one cohesive paragraph of practical, actionable guidance
- Include numerical citations in square brackets [1] and list references in references_and_resources
- Write in clear, accessible language while maintaining scientific accuracy"""

EXAMPLE_NEURODIVERSITY_ARTICLE = {
    "title": "Understanding Autism Spectrum Disorder",
    "slug": "understanding-autism-spectrum-disorder",
    "summary": "Autism Spectrum Disorder (ASD) is a neurodevelopmental condition marked by differences in social communication and by focused, repetitive patterns of behavior. It affects roughly 1-2% of people and presents very differently from person to person.",
    "category": "neurodiversity",
    "overview": "Autism is a lifelong neurodevelopmental difference that shapes how people communicate, process sensory input and engage with the world [1].",
    "neurodiversity_perspective": "The neurodiversity paradigm treats autism as a natural variation in human neurology rather than a defect to be fixed [2].",
    "common_strengths_and_challenges": "Many autistic people show strong attention to detail and pattern recognition, while sensory overload and unwritten social rules can be challenging [3].",
    "prevalence_and_demographics": "Current estimates place prevalence at 1-2% of the population, with women and adults likely underdiagnosed [4].",
    "mechanisms_and_understanding": "Research points to interacting genetic and environmental factors and to differences in brain connectivity [5].",
    "evidence_summary": "Meta-analyses suggest that early, individualized support improves communication and adaptive skills [6].",
    "practical_applications": "Sensory-friendly environments, clear communication and predictable routines help autistic people thrive [7].",
    "common_misconceptions": "Autism is not outgrown in childhood, and most autistic people do not have savant abilities [8].",
    "lived_experience": "Autistic adults consistently report that acceptance from others matters more to their well-being than attempts to mask differences [9].",
    "future_directions": "Emerging work focuses on adult diagnosis, participatory research and better access to services [10].",
    "references_and_resources": "[1] American Psychiatric Association. DSM-5-TR. 2022. ...",
    "status": "draft",
    "tags": ["autism", "neurodiversity", "neurodevelopment", "sensory processing"],
}

EXAMPLE_PSYCHOLOGY_ARTICLE = {
    "title": "Understanding Cognitive Development",
    "slug": "understanding-cognitive-development",
    "summary": "Cognitive development is the growth of thinking, reasoning and problem-solving abilities across the lifespan. It follows broadly shared stages while varying considerably between individuals.",
    "category": "psychology",
    "overview": "Cognitive development describes how intellectual abilities change from infancy to old age [1].",
    "definition": "The process through which people acquire, organize and use knowledge and skills [2].",
    "mechanisms": "Development emerges from the interaction of brain maturation, experience and social learning [3].",
    "relevance": "Understanding cognitive development informs education, parenting and mental health practice [4].",
    "key_studies": "Piaget's stage theory and Vygotsky's sociocultural theory remain foundational, refined by recent neuroimaging work [5].",
    "evidence_summary": "Longitudinal studies show that enriched early environments predict better later cognitive outcomes [6].",
    "practical_applications": "Age-appropriate challenges and responsive conversation support children's thinking skills [7].",
    "common_misconceptions": "Development is neither purely biological nor identical in timing for every child [8].",
    "future_directions": "Research increasingly links developmental trajectories to brain network maturation [9].",
    "references_and_resources": "[1] Piaget J. The Origins of Intelligence in Children. 1952. ...",
    "status": "draft",
    "tags": ["cognitive development", "psychology", "learning"],
}

EXAMPLE_RISK_FACTORS_ARTICLE = {
    "title": "Childhood Trauma as a Risk Factor",
    "slug": "childhood-trauma-as-a-risk-factor",
    "summary": "Childhood trauma is exposure to abuse, neglect or household dysfunction before adulthood. It is one of the strongest known risk factors for later depression, anxiety and substance use.",
    "category": "risk_factors",
    "overview": "Adverse childhood experiences are common and have lasting effects on mental and physical health [1].",
    "prevalence": "Around two thirds of adults report at least one adverse childhood experience [2].",
    "mechanisms": "Chronic stress in childhood alters stress-hormone regulation and brain development [3].",
    "evidence_summary": "Meta-analyses show a 2-4 fold increase in the risk of mental health conditions after childhood trauma [4].",
    "modifiable_factors": "Early intervention and trauma-informed care reduce long-term effects [5].",
    "protective_factors": "Stable, supportive relationships buffer the impact of adversity [6].",
    "practical_takeaways": "Recognize the signs of trauma, seek trauma-informed care and build supportive relationships [7].",
    "practical_applications": "Schools and clinics can screen for adverse experiences and offer trauma-informed support [8].",
    "reliability_score": 0.85,
    "future_directions": "Research is identifying which early interventions best prevent later illness [9].",
    "references_and_resources": "[1] Felitti VJ, et al. Am J Prev Med. 1998. ...",
    "status": "draft",
    "tags": ["childhood trauma", "risk factors", "resilience"],
}

SECTION_ORDER: Dict[str, List[str]] = {
    'neurodiversity': [
        'overview', 'neurodiversity_perspective', 'common_strengths_and_challenges',
        'prevalence_and_demographics', 'mechanisms_and_understanding', 'evidence_summary',
        'common_misconceptions', 'practical_applications', 'lived_experience',
        'references_and_resources',
    ],
    'mental_health': [
        'overview', 'evidence_summary', 'practical_applications', 'references_and_resources',
    ],
    'interventions': [
        'overview', 'evidence_summary', 'practical_applications', 'future_directions',
        'references_and_resources',
    ],
}

SECTION_PROMPTS: Dict[str, str] = {
    'summary': """Generate a clear, direct summary for an article about "{topic}" in the {category} category.

Requirements:
""" + SUMMARY_RULES + """

Example good summary: "Obsessive-Compulsive Disorder (OCD) is a mental health condition characterized by persistent, unwanted thoughts (obsessions) and repetitive behaviors (compulsions). It affects approximately 1-2% of the population and can significantly impact daily functioning and quality of life."

Write only the summary, nothing else.""",

    'overview': """Generate a clear, engaging overview for an article about "{topic}" in the {category} category.

Requirements:
- Start with a clear definition and context
- Explain why this topic matters
- Include key statistics or prevalence data
- Use accessible language
- Include relevant citations

Write only the overview, nothing else.""",

    'practical_takeaways': """Generate practical takeaways for an article about "{topic}" in the {category} category.

Requirements:
- Focus on actionable advice and strategies
- Include evidence-based recommendations
- Include 3-5 key points
- Format as a cohesive paragraph

Write only the practical takeaways, nothing else.""",
}

EVIDENCE_ASSESSMENT_PROMPT = """You are an expert research analyst evaluating the reliability of evidence for mental health interventions, lifestyle factors and risk factors.

Analyze the following evidence summary for "{title}" and provide a structured assessment:

EVIDENCE SUMMARY:
{evidence_summary}

Provide a JSON response with the following structure:

{{
  "effectSize": {{"assessment": "large|medium|small|verySmall", "reasoning": "..."}},
  "studyQuality": {{"assessment": "metaAnalysis|rct|longitudinal|crossSectional|caseStudy", "reasoning": "..."}},
  "replication": {{"assessment": "highlyConsistent|mostlyConsistent|mixed|inconsistent", "reasoning": "..."}},
  "sampleSize": {{"assessment": "large|medium|small", "reasoning": "..."}},
  "confidence": "high|medium|low",
  "notes": "Any additional observations about the evidence quality"
}}

Guidelines:
- Be conservative in your assessments
- If information is unclear or missing, default to lower scores
- Focus on the actual evidence presented, not general knowledge
- If multiple studies are mentioned, assess the overall pattern

Return ONLY the JSON object, no additional text."""

RISK_FACTOR_TOPICS = [
    'Childhood Trauma',
    'Genetic Predisposition',
    'Chronic Stress',
    'Social Isolation',
    'Substance Abuse',
    'Sleep Deprivation',
    'Poor Nutrition',
    'Physical Inactivity',
    'Environmental Toxins',
    'Socioeconomic Disadvantage',
    'Discrimination and Racism',
    'Family History of Mental Illness',
    'Early Life Adversity',
    'Urban Living',
    'Digital Overuse',
    'Workplace Stress',
    'Financial Insecurity',
    'Relationship Problems',
    'Academic Pressure',
    'Social Media Use',
    'Climate Change Anxiety',
    'Political Polarization',
    'Healthcare Access Barriers',
    'Housing Instability',
    'Food Insecurity',
]


def example_article_for(category: str) -> Dict:
    """Worked example shown to the model for a category"""
    if category in ('psychology', 'neuroscience', 'brain_health'):
        return EXAMPLE_PSYCHOLOGY_ARTICLE
    if category == 'risk_factors':
        return EXAMPLE_RISK_FACTORS_ARTICLE
    return EXAMPLE_NEURODIVERSITY_ARTICLE
