from mangum import Mangum

from langlab.main import create_app

# Serverless entry point (Vercel / Lambda); AWS clients are built once per cold start
app = create_app()
handler = Mangum(app, lifespan="off")
