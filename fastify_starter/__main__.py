from fastify_starter.pipeline import main

main()
