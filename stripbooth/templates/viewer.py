from html import escape


def get_viewer_template(file_url: str, filename: str) -> str:
    url = escape(file_url, quote=True)
    if filename.lower().endswith((".webm", ".mp4", ".avi")):
        media = f'<video src="{url}" controls autoplay loop muted playsinline></video>'
        label = "Download video"
    else:
        media = f'<img src="{url}" alt="Photobooth strip" />'
        label = "Download PNG"

    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>Photobooth Download</title>
    <style>
      body {{ font-family: system-ui, sans-serif; background: #fef6e4; margin: 0; padding: 24px; text-align: center; }}
      .card {{ background: #fff; padding: 24px; border-radius: 16px; box-shadow: 0 12px 30px rgba(0,0,0,0.12); }}
      img, video {{ max-width: 100%; border-radius: 12px; border: 3px solid #403b37; }}
      a {{ display: inline-block; margin-top: 16px; padding: 12px 20px; background: #7bdff2; color: #403b37; text-decoration: none; border-radius: 999px; font-weight: 600; }}
    </style>
  </head>
  <body>
    <div class="card">
      <h2>Your photobooth strip</h2>
      {media}
      <div>
        <a href="{url}" download>{label}</a>
      </div>
      <p>Tip: On iPhone/Android, tap and hold to save to Photos.</p>
    </div>
  </body>
</html>"""
