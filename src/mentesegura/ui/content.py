"""Static product text for the landing page and the dashboard tabs."""

HERO_TITLE = "Seu Espaço Seguro de Apoio Emocional"
HERO_SUBTITLE = (
    "Um ambiente acolhedor onde você pode expressar seus sentimentos com segurança, "
    "contando com o suporte da IA Simone e profissionais especializados."
)

# (icon, title, description)
FEATURES = [
    ("chat", "Conversa com Simone",
     "Nossa IA psicológica está disponível 24/7 para ouvir você com empatia e compreensão."),
    ("shield", "Espaço Confidencial",
     "Suas conversas são privadas e seguras. Você pode se expressar livremente."),
    ("groups", "Apoio Profissional",
     "Em situações críticas, conectamos você com nossa psicóloga escolar."),
    ("menu_book", "Recursos Educativos",
     "Acesse conteúdos sobre saúde mental, respeito e desenvolvimento pessoal."),
    ("favorite", "Palestras e Eventos",
     "Participe de palestras sobre saúde emocional e bem-estar escolar."),
    ("psychology", "Acompanhamento",
     "Monitore seu progresso emocional e celebre suas conquistas."),
]

CTA_TITLE = "Pronto para cuidar da sua saúde mental?"
CTA_SUBTITLE = "Junte-se a centenas de alunos que já encontraram apoio e acolhimento."

FOOTER = (
    "© 2025 Apoio Emocional. Desenvolvido com ❤️ por Rafaella Velace, Murilo Lima, "
    "Jullya Aparecida, Sarah Pereira, Emilly Vitória para o bem-estar estudantil."
)

RESOURCES_INTRO = (
    "Aqui você encontra informações rápidas do motivo pelo qual falar sobre sentimentos "
    "é tão importante para o nosso bem-estar emocional."
)

RESOURCES = [
    ("Escuta sem julgamentos",
     "Falar com uma psicóloga ou com uma IA voltada para apoio emocional oferece um espaço em que "
     "você pode simplesmente ser você, sem medo de dizer algo “errado” ou de ser mal-interpretado. "
     "Ali, não existe cobrança, comparação ou crítica. Somente escuta genuína, compreensão e respeito "
     "pelo que você está vivendo."),
    ("Alívio emocional",
     "Carregar tudo sozinho pode ser exaustivo. Às vezes, basta colocar em palavras aquilo que está te "
     "pesando para sentir uma leveza imediata. Falar funciona como abrir uma janela num quarto abafado: "
     "o ar finalmente circula, a tensão diminui e você respira melhor."),
    ("Organização dos pensamentos",
     "Quando as emoções se misturam, elas podem virar um nó difícil de entender. Conversar com alguém "
     "que sabe conduzir essa reflexão ajuda a separar os fios, identificar o que está acontecendo e "
     "enxergar com mais nitidez."),
    ("Autocuidado",
     "Buscar ajuda é uma das formas mais sinceras de se cuidar. Ter a coragem de pedir apoio mostra "
     "força, maturidade e amor próprio. É como dizer a si mesmo: “Eu importo. O que eu sinto importa. "
     "Eu mereço estar bem.”"),
    ("Disponibilidade constante (IA)",
     "Uma IA de apoio emocional pode estar presente nos momentos em que você não tem ninguém para "
     "conversar. Ela não substitui um profissional, mas pode ser uma companhia útil e acolhedora até "
     "que você consiga buscar ajuda humana."),
]

CARE_INTRO = (
    "Conversar sobre o que sentimos é um passo importante para o cuidado emocional. Falar abre espaço "
    "para reconhecimento, acolhimento e suporte: reduz o isolamento, alivia tensões e facilita a procura "
    "por ajuda quando necessária."
)

CARE_SECTIONS = [
    ("Benefícios",
     "Aumenta o autoconhecimento e a consciência emocional. Permite receber apoio social e profissional. "
     "Ajuda a regular emoções difíceis e reduzir ansiedade. Fortalece vínculos e cria ambientes mais "
     "acolhedores."),
    ("Como começo a falar sobre meus sentimentos se nem eu os entendo?",
     "Tudo bem não saber por onde começar. Falar sobre sentimentos não exige perfeição, só exige coragem. "
     "Comece pequeno: *“Eu não sei exatamente como explicar, mas quero tentar.”* Isso já abre uma porta."),
    ("Onde posso buscar por ajuda?",
     "Orientadores escolares, psicólogos e serviços de apoio podem acolher, orientar e encaminhar para "
     "atendimento adequado. Você não precisa enfrentar isso sozinho."),
]
