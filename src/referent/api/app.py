"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from referent.api.routes import router
from referent.config import Settings
from referent.services.extractor import ArticleExtractor
from referent.services.generator import GenerationClient

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Некорректное тело запроса"

INDEX_HTML = """
<!DOCTYPE html>
<html lang="ru">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Референт AI</title>
    <style>
      :root {
        color-scheme: dark;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
        --color-bg: #020617;
        --color-panel: #0f172a;
        --color-border: #334155;
        --color-accent: #10b981;
        --color-muted: #94a3b8;
        --color-error: #f87171;
        background: var(--color-bg);
        color: #e2e8f0;
      }

      body {
        margin: 0;
        min-height: 100vh;
        display: flex;
        justify-content: center;
        background: radial-gradient(circle at top, #0f172a, var(--color-bg) 60%);
      }

      .page {
        width: min(860px, 100%);
        padding: 48px 24px 64px;
        display: grid;
        gap: 28px;
      }

      .eyebrow {
        margin: 0;
        color: var(--color-accent);
        font-size: 0.85rem;
        letter-spacing: 0.08em;
        text-transform: uppercase;
      }

      h1 {
        margin: 8px 0 12px;
        font-size: clamp(2rem, 4vw, 2.6rem);
      }

      .lead {
        margin: 0;
        color: var(--color-muted);
        line-height: 1.6;
      }

      .panel {
        background: var(--color-panel);
        border: 1px solid var(--color-border);
        border-radius: 20px;
        padding: 24px;
        display: grid;
        gap: 12px;
      }

      label {
        font-weight: 600;
      }

      input[type="url"] {
        width: 100%;
        box-sizing: border-box;
        padding: 12px 16px;
        border-radius: 12px;
        border: 1px solid var(--color-border);
        background: var(--color-bg);
        color: inherit;
        font-size: 1rem;
      }

      .hint {
        margin: 0;
        color: var(--color-muted);
        font-size: 0.9rem;
      }

      .hint.error {
        color: var(--color-error);
      }

      .actions {
        display: grid;
        grid-template-columns: repeat(auto-fit, minmax(180px, 1fr));
        gap: 12px;
      }

      button {
        appearance: none;
        text-align: left;
        border-radius: 16px;
        padding: 14px 16px;
        border: 1px solid var(--color-border);
        background: rgba(15, 23, 42, 0.6);
        color: inherit;
        cursor: pointer;
        display: grid;
        gap: 4px;
      }

      button strong {
        font-size: 1rem;
      }

      button span {
        color: var(--color-muted);
        font-size: 0.85rem;
      }

      button.selected {
        border-color: var(--color-accent);
        background: rgba(16, 185, 129, 0.1);
      }

      button:disabled {
        opacity: 0.7;
        cursor: wait;
      }

      .result {
        min-height: 120px;
        line-height: 1.7;
        white-space: pre-wrap;
      }

      .result ul {
        margin: 0;
        padding-left: 20px;
        display: grid;
        gap: 8px;
        white-space: normal;
      }

      .status {
        color: var(--color-muted);
      }
    </style>
  </head>
  <body>
    <div class="page">
      <header>
        <p class="eyebrow">Референт AI · английские статьи → русский конспект</p>
        <h1>Суммаризация английских статей в один клик</h1>
        <p class="lead">
          Вставьте ссылку на англоязычную статью, выберите формат ответа и
          получите готовый русский текст: обзор, тезисы, пост для Telegram или перевод.
        </p>
      </header>

      <section class="panel">
        <label for="article-url">URL англоязычной статьи (обязательно)</label>
        <input
          id="article-url"
          type="url"
          placeholder="https://example.com/interesting-article-in-english"
        />
        <p class="hint" id="url-hint">
          Пример: статья из блогов, медиа или документации на английском.
        </p>
      </section>

      <section class="panel">
        <p class="lead">Что нужно получить от статьи?</p>
        <div class="actions" id="actions">
          <button type="button" data-action="summary">
            <strong>О чем статья?</strong>
            <span>Краткий пересказ основного смысла статьи.</span>
          </button>
          <button type="button" data-action="thesis">
            <strong>Тезисы</strong>
            <span>Список ключевых тезисов и идей.</span>
          </button>
          <button type="button" data-action="telegram">
            <strong>Пост для Telegram</strong>
            <span>Готовый пост для канала или личного блога.</span>
          </button>
          <button type="button" data-action="translate">
            <strong>Перевод</strong>
            <span>Полный перевод статьи на русский язык.</span>
          </button>
        </div>
      </section>

      <section class="panel">
        <div class="status" id="status">Результат появится здесь.</div>
        <div class="result" id="result"></div>
      </section>
    </div>
    <script>
      window.addEventListener("DOMContentLoaded", () => {
        const urlInput = document.getElementById("article-url");
        const urlHint = document.getElementById("url-hint");
        const statusEl = document.getElementById("status");
        const resultEl = document.getElementById("result");
        const buttons = Array.from(document.querySelectorAll("#actions button"));

        if (!urlInput || !urlHint || !statusEl || !resultEl || !buttons.length) {
          return;
        }

        const DEFAULT_HINT = urlHint.textContent;
        const BULLET_RE = /^\\s*(?:[•\\-–—*]|\\d+[.)])\\s*/;

        const validateUrl = (value) => {
          const trimmed = value.trim();
          if (!trimmed) {
            return "Введите URL статьи.";
          }

          try {
            const parsed = new URL(trimmed);
            if (!/^https?:$/.test(parsed.protocol)) {
              return "URL должен начинаться с http:// или https://.";
            }
            if (!parsed.hostname) {
              return "Некорректный адрес: отсутствует домен.";
            }
          } catch (error) {
            console.error("[validateUrl]", error);
            return "Некорректный URL. Проверьте адрес статьи.";
          }

          return null;
        };

        const showHint = (message) => {
          urlHint.textContent = message || DEFAULT_HINT;
          urlHint.classList.toggle("error", Boolean(message));
        };

        const renderResult = (action, text) => {
          resultEl.innerHTML = "";
          const normalized = (text ?? "").trim();

          if (action === "thesis") {
            const items = normalized
              .split(/\\n/)
              .map((line) => line.replace(BULLET_RE, "").trim())
              .filter(Boolean);
            const list = document.createElement("ul");
            items.forEach((item) => {
              const li = document.createElement("li");
              li.textContent = item;
              list.appendChild(li);
            });
            resultEl.appendChild(list);
            return;
          }

          resultEl.textContent = normalized;
        };

        const postJson = async (url, body) => {
          const response = await fetch(url, {
            method: "POST",
            headers: { "Content-Type": "application/json" },
            body: JSON.stringify(body),
          });
          const payload = await response.json().catch(() => null);
          if (!response.ok) {
            const message = payload && payload.error ? payload.error : `Ошибка запроса (${response.status})`;
            throw new Error(message);
          }
          return payload || {};
        };

        const runAction = async (action, url) => {
          if (action === "translate") {
            const article = await postJson("/api/parse", { url });
            const source = [article.title, article.content].filter(Boolean).join("\\n\\n");
            if (!source.trim()) {
              throw new Error("Не удалось извлечь текст статьи для перевода.");
            }
            const payload = await postJson("/api/translate", { content: source });
            return payload.translation ?? "";
          }

          const payload = await postJson("/api/generate", { url, mode: action });
          return payload.result ?? "";
        };

        urlInput.addEventListener("input", () => {
          if (urlHint.classList.contains("error")) {
            showHint(validateUrl(urlInput.value));
          }
        });

        buttons.forEach((button) => {
          button.addEventListener("click", async () => {
            const action = button.dataset.action;
            const validationError = validateUrl(urlInput.value);
            if (validationError) {
              showHint(validationError);
              resultEl.innerHTML = "";
              return;
            }

            showHint(null);
            buttons.forEach((other) => {
              other.disabled = true;
              other.classList.toggle("selected", other === button);
            });
            statusEl.textContent = "Обрабатываем статью...";
            resultEl.innerHTML = "";

            try {
              const text = await runAction(action, urlInput.value.trim());
              renderResult(action, text);
              statusEl.textContent = `Готово в ${new Date().toLocaleTimeString()}`;
            } catch (error) {
              console.error(error);
              statusEl.textContent = error instanceof Error
                ? error.message
                : "Произошла ошибка при обращении к серверу. Попробуйте ещё раз.";
            } finally {
              buttons.forEach((other) => {
                other.disabled = false;
              });
            }
          });
        });
      });
    </script>
  </body>
</html>
"""


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        {"error": str(exc.detail)},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected malformed request body for %s: %s", request.url.path, exc.errors())
    return JSONResponse({"error": INVALID_BODY_MESSAGE}, status_code=400)


def create_app(
    settings: Settings | None = None,
    *,
    extractor: ArticleExtractor | None = None,
    generator: GenerationClient | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    if not settings.generation_configured:
        logger.error("OPENROUTER_API_KEY is not set; generation and translation will fail")

    app = FastAPI(title="Referent", description="English article to Russian digest API")
    app.state.settings = settings
    app.state.extractor = extractor or ArticleExtractor(timeout=settings.fetch_timeout)
    app.state.generator = generator or GenerationClient(settings)

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(router, prefix="/api")

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        return INDEX_HTML

    @app.get("/healthz")
    async def healthz() -> dict:
        return {"status": "ok", "generation_configured": settings.generation_configured}

    return app


app = create_app()
